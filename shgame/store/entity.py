# shgame/store/entity.py
from __future__ import annotations

import copy
from typing import Any, ClassVar, Dict, Optional

import structlog

from shgame.store.codec import FieldType, decode, encode
from shgame.store.errors import FieldError
from shgame.store.redis_keys import EK

log = structlog.get_logger(__name__)


class EntityField:
    """
    Declares one stored field on an Entity subclass.
    Attribute access goes through Entity.get/set so pending tracking always applies.
    """
    def __init__(self, ftype: FieldType, default: Any = None):
        self.ftype = ftype
        self.default = default
        self.name = ""

    def __set_name__(self, owner, name: str) -> None:
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.get(self.name)

    def __set__(self, obj, value) -> None:
        obj.set(self.name, value)


class Entity:
    """
    A typed record stored as one Redis hash at "<kind>:<id>".

    committed holds the last values read from or written to the store,
    pending holds fields changed since then. Only pending fields are written
    by save(). A new instance starts with its defaults pending, so saving a
    record that was never loaded creates it.
    """
    kind: ClassVar[str] = ""
    fields: ClassVar[Dict[str, EntityField]] = {}

    id = EntityField(FieldType.INT, 0)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        fields: Dict[str, EntityField] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, EntityField):
                    fields[name] = attr
        cls.fields = fields

    def __init__(self, store, id: int):
        self.store = store
        self.committed: Dict[str, Any] = {}
        self.pending: Dict[str, Any] = {
            name: copy.deepcopy(f.default) for name, f in self.fields.items()
        }
        self.pending["id"] = id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind}:{self.id}>"

    @property
    def keys(self) -> EK:
        return EK(self.kind, self.get("id"))

    # ----------------------------
    # Field access
    # ----------------------------
    def get(self, field: str) -> Optional[Any]:
        if field in self.pending:
            value = self.pending[field]
        elif field in self.committed:
            value = self.committed[field]
        else:
            return None
        # callers mutate lists freely; they must set() them back to persist
        if isinstance(value, (list, dict)):
            return copy.deepcopy(value)
        return value

    def set(self, field: str, value: Any) -> None:
        if field not in self.fields:
            raise FieldError(self.kind, field)
        self.pending[field] = value

    def discard(self) -> None:
        """Drop every change made since the last load/save."""
        ident = self.get("id")
        self.pending = {}
        if "id" not in self.committed:
            self.pending["id"] = ident

    def serialize(self) -> Dict[str, Any]:
        return copy.deepcopy({**self.committed, **self.pending})

    # ----------------------------
    # Store round trips
    # ----------------------------
    async def load(self) -> bool:
        """
        Read every declared field in one batch.
        Returns False when the record does not exist; defaults stay pending.
        """
        names = list(self.fields)
        raw = await self.store.load_fields(self.keys.record(), names)

        committed: Dict[str, Any] = {}
        for name, value in zip(names, raw):
            if value is not None:
                committed[name] = decode(self.fields[name].ftype, value)

        if not committed:
            log.debug("entity_not_found", key=self.keys.record())
            return False

        # the key already names the record; a hash without an id field keeps it
        committed.setdefault("id", self.get("id"))
        self.committed = committed
        self.pending = {}
        return True

    async def save(self) -> Dict[str, Any]:
        """
        Write pending fields and refresh the record TTL atomically.
        Returns the delta that was written. On failure pending is kept for a retry.
        """
        if not self.pending:
            return {}

        mapping = {
            name: encode(self.fields[name].ftype, value)
            for name, value in self.pending.items()
        }
        await self.store.save_fields(self.keys.record(), mapping)

        delta = copy.deepcopy(self.pending)
        self.committed.update(self.pending)
        self.pending = {}
        log.debug("entity_saved", key=self.keys.record(), fields=sorted(delta))
        return delta

    async def destroy(self) -> None:
        """
        Delete the record. The last known values move to pending so the
        caller can still serialize what was removed.
        """
        await self.store.delete(self.keys.record())
        self.pending = {**self.committed, **self.pending}
        self.committed = {}
        log.debug("entity_destroyed", key=self.keys.record())
