from sekai_sync.engine.classify import GachaClassification, classify_gacha

__all__ = [
    "GachaClassification",
    "classify_gacha",
]
