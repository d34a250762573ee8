from .words import Word, WordRecord


__all__ = [
    "Word",
    "WordRecord",
]
