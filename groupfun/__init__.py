"""Entertainment features for group chat bots: games, registries, scores and web texts."""

__version__ = "0.1.0"

__all__ = [
    "marriage",
    "reborn",
    "runcode",
    "score",
    "shadiao",
    "sleep",
    "tarot",
    "thesaurus",
    "tiangou",
    "vtb_model",
    "vtb_quotation",
    "wordcount",
    "wordle",
    "wtf",
    "ymgal",
    "zaobao",
]