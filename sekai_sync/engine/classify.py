"""
Sekai Sync - Gacha Pool Classification

Upstream marks festival and birthday banners inconsistently: sometimes via
the free-text gachaType, sometimes only through elevated drop rates. The
classifier checks both signals, type string first.

Ordered rules (first match wins):
1. gachaType contains "birthday"          -> birthday (rates unset)
2. gachaType contains "fes"/"festival"    -> fes      (rates unset)
3. rarity_birthday rate > 0               -> birthday
4. rarity_4 rate >= 6.0                   -> fes
5. rarity_4 rate > 0                      -> normal
6. otherwise                              -> other

Pure and total: never raises, every gacha maps to exactly one category.
"""

from __future__ import annotations

from typing import NamedTuple

from sekai_sync.config import CardRarity, GachaCategory
from sekai_sync.pipeline.master import Gacha

FES_RARITY4_RATE_FLOOR = 6.0


class GachaClassification(NamedTuple):
    """Derived pool fields written alongside the gacha row."""
    category: GachaCategory
    rarity4_rate: float | None
    birthday_rate: float | None


def classify_gacha(gacha: Gacha) -> GachaClassification:
    """
    Derive (category, rarity4_rate, birthday_rate) for one gacha.

    Args:
        gacha: Parsed gacha master record.

    Returns:
        GachaClassification. Rates are None when decided by the type string
        or when the rate list has no entry for that rarity.
    """
    lower_type = gacha.gacha_type.lower()
    if "birthday" in lower_type:
        return GachaClassification(GachaCategory.BIRTHDAY, None, None)
    if "fes" in lower_type or "festival" in lower_type:
        return GachaClassification(GachaCategory.FES, None, None)

    rarity4: float | None = None
    birthday: float | None = None
    for rr in gacha.rarity_rates:
        if rr.card_rarity_type == CardRarity.RARITY_4.value:
            rarity4 = rr.rate
        elif rr.card_rarity_type == CardRarity.RARITY_BIRTHDAY.value:
            birthday = rr.rate

    if birthday is not None and birthday > 0:
        category = GachaCategory.BIRTHDAY
    elif rarity4 is not None and rarity4 >= FES_RARITY4_RATE_FLOOR:
        category = GachaCategory.FES
    elif rarity4 is not None and rarity4 > 0:
        category = GachaCategory.NORMAL
    else:
        category = GachaCategory.OTHER

    return GachaClassification(category, rarity4, birthday)
