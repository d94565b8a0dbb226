# shgame/store/errors.py
from __future__ import annotations


class FieldError(AttributeError):
    """Raised when setting a field an entity does not declare."""

    def __init__(self, kind: str, field: str):
        super().__init__(f"Field {field!r} is not valid on {kind}")
        self.kind = kind
        self.field = field


class StoreError(RuntimeError):
    """Backend failure while loading, saving, deleting or locking a record."""
