# gradewatch/storage/__init__.py
from typing import Callable, Dict, Type
from .base import DocumentStore

_REGISTRY: Dict[str, Type[DocumentStore]] = {}

def register_store(key: str) -> Callable[[Type[DocumentStore]], Type[DocumentStore]]:
    """Class decorator to auto-register a document-store backend."""
    def decorator(cls: Type[DocumentStore]) -> Type[DocumentStore]:
        _REGISTRY[key.lower()] = cls
        return cls
    return decorator

def get_store(key: str) -> Type[DocumentStore]:
    try:
        return _REGISTRY[key.lower()]
    except KeyError:
        raise ValueError(f"No document store registered for '{key}'") from None

def open_store(settings, request=None) -> DocumentStore:
    return get_store(settings.store).from_settings(settings, request)

class StoreError(Exception):
    pass

# Import backends so they register.
from . import sqlite, workers_kv  # noqa: E402,F401
