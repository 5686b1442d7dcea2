"""Result storage backends."""

from .sqlite import SQLiteWriter, SCOPE_HORIZON, SCOPE_TARGET_EPOCH

__all__ = [
    "SQLiteWriter",
    "SCOPE_HORIZON",
    "SCOPE_TARGET_EPOCH",
]
