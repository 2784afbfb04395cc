# gradewatch/storage/base.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Optional

from utils.key_path import KeyPath, delete_nested, get_nested, parse_key_path, set_nested


class DocumentStore(ABC):
    """JSON documents by key, addressable at nested paths.

    Backends only implement whole-document read/write/remove. Every nested
    operation here is a read-modify-write of the full document: last write
    wins, there is no versioning.
    """

    @abstractmethod
    async def _read(self, key: str) -> Optional[Any]:
        """Whole document, or None when the key is absent."""

    @abstractmethod
    async def _write(self, key: str, value: Any) -> None: ...

    @abstractmethod
    async def _remove(self, key: str) -> None: ...

    @classmethod
    def from_settings(cls, settings, request=None) -> "DocumentStore":
        raise NotImplementedError

    async def get(self, key: str, path: KeyPath = None) -> Any:
        doc = await self._read(key)
        if doc is None or not path:
            return doc
        return get_nested(doc, path)

    async def set(self, key: str, value: Any, path: KeyPath = None) -> None:
        if not path:
            await self._write(key, value)
            return
        if not parse_key_path(path):
            raise ValueError(f"empty key path: {path!r}")
        doc = await self._read(key)
        await self._write(key, set_nested(doc if isinstance(doc, (dict, list)) else {}, path, value))

    async def delete(self, key: str, path: KeyPath = None) -> None:
        if not path:
            await self._remove(key)
            return
        doc = await self._read(key)
        if not isinstance(doc, (dict, list)):
            return  # nothing to delete
        updated = delete_nested(doc, path)
        if updated is not doc:
            await self._write(key, updated)

    async def append(self, key: str, value: Any) -> None:
        existing = await self._read(key)
        if not isinstance(existing, list):
            existing = []
        await self._write(key, [*existing, value])
