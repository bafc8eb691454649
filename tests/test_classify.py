"""
Tests for gacha pool classification (sekai_sync/engine/classify.py).

Covers:
- Type-string rules take priority over rates (birthday, fes/festival, any case)
- Rate rules: birthday rate > 0, rarity_4 >= 6.0, rarity_4 > 0, fallback
- Later duplicate rate entries overwrite earlier ones
- Rates are reported only when decided by the rate scan
"""

from __future__ import annotations

import pytest

from sekai_sync.config import GachaCategory
from sekai_sync.engine.classify import FES_RARITY4_RATE_FLOOR, classify_gacha
from sekai_sync.pipeline.master import Gacha


def make_gacha(gacha_type: str = "ceil", rates: list[tuple[str, float]] | None = None) -> Gacha:
    return Gacha.model_validate({
        "id": 1,
        "gachaType": gacha_type,
        "name": "test",
        "gachaCardRarityRates": [
            {"cardRarityType": rarity, "lotteryType": "normal", "rate": rate}
            for rarity, rate in (rates or [])
        ],
    })


# ---------------------------------------------------------------------------
# Type-string rules
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("gacha_type", ["birthday", "BIRTHDAY", "Birthday_2024", "ceil_birthday"])
def test_birthday_type_wins_over_rates(gacha_type: str) -> None:
    """A birthday type string decides the category whatever the rates say."""
    gacha = make_gacha(gacha_type, [("rarity_4", 12.0), ("rarity_birthday", 0.0)])

    result = classify_gacha(gacha)

    assert result.category is GachaCategory.BIRTHDAY
    assert result.rarity4_rate is None
    assert result.birthday_rate is None


@pytest.mark.parametrize("gacha_type", ["fes", "FES", "colorful_festival", "Festival", "limited_fes"])
def test_fes_type_wins_over_rates(gacha_type: str) -> None:
    gacha = make_gacha(gacha_type, [("rarity_4", 1.0)])

    result = classify_gacha(gacha)

    assert result.category is GachaCategory.FES
    assert result.rarity4_rate is None
    assert result.birthday_rate is None


def test_birthday_type_checked_before_fes_type() -> None:
    result = classify_gacha(make_gacha("birthday_fes"))

    assert result.category is GachaCategory.BIRTHDAY


# ---------------------------------------------------------------------------
# Rate rules
# ---------------------------------------------------------------------------


def test_birthday_rate_positive_is_birthday() -> None:
    gacha = make_gacha("ceil", [("rarity_4", 6.0), ("rarity_birthday", 0.5)])

    result = classify_gacha(gacha)

    assert result.category is GachaCategory.BIRTHDAY
    assert result.rarity4_rate == pytest.approx(6.0)
    assert result.birthday_rate == pytest.approx(0.5)


def test_zero_birthday_rate_falls_through_to_rarity4() -> None:
    gacha = make_gacha("ceil", [("rarity_birthday", 0.0), ("rarity_4", 3.0)])

    result = classify_gacha(gacha)

    assert result.category is GachaCategory.NORMAL
    assert result.birthday_rate == 0.0


@pytest.mark.parametrize("rate", [FES_RARITY4_RATE_FLOOR, 6.5, 12.0])
def test_rarity4_at_or_above_floor_is_fes(rate: float) -> None:
    result = classify_gacha(make_gacha("ceil", [("rarity_4", rate)]))

    assert result.category is GachaCategory.FES
    assert result.rarity4_rate == pytest.approx(rate)
    assert result.birthday_rate is None


@pytest.mark.parametrize("rate", [0.1, 3.0, 5.99])
def test_rarity4_positive_below_floor_is_normal(rate: float) -> None:
    result = classify_gacha(make_gacha("ceil", [("rarity_4", rate)]))

    assert result.category is GachaCategory.NORMAL


def test_zero_rarity4_is_other() -> None:
    result = classify_gacha(make_gacha("ceil", [("rarity_4", 0.0)]))

    assert result.category is GachaCategory.OTHER
    assert result.rarity4_rate == 0.0


def test_no_rates_is_other() -> None:
    result = classify_gacha(make_gacha("ceil"))

    assert result.category is GachaCategory.OTHER
    assert result.rarity4_rate is None
    assert result.birthday_rate is None


def test_only_lower_rarities_is_other() -> None:
    result = classify_gacha(make_gacha("ceil", [("rarity_3", 8.5), ("rarity_2", 88.5)]))

    assert result.category is GachaCategory.OTHER


def test_later_duplicate_rate_overwrites_earlier() -> None:
    """Only the last rarity_4 entry counts."""
    result = classify_gacha(make_gacha("ceil", [("rarity_4", 9.0), ("rarity_4", 3.0)]))

    assert result.category is GachaCategory.NORMAL
    assert result.rarity4_rate == pytest.approx(3.0)


def test_empty_type_string_uses_rates() -> None:
    result = classify_gacha(make_gacha("", [("rarity_4", 6.0)]))

    assert result.category is GachaCategory.FES
