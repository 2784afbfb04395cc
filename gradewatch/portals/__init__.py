# gradewatch/portals/__init__.py
from typing import Callable, Dict, Type
from .base import LmsClient

_REGISTRY: Dict[str, Type[LmsClient]] = {}

def register_portal(key: str) -> Callable[[Type[LmsClient]], Type[LmsClient]]:
    """Class decorator to auto-register an LMS client."""
    def decorator(cls: Type[LmsClient]) -> Type[LmsClient]:
        _REGISTRY[key.lower()] = cls
        return cls
    return decorator

def get_portal(key: str) -> Type[LmsClient]:
    try:
        return _REGISTRY[key.lower()]
    except KeyError:  # nicer error than raw KeyError
        raise ValueError(f"No portal engine registered for '{key}'") from None

class LmsError(Exception):
    pass

class LoginError(LmsError):
    """The LMS rejected our credentials."""

class MalformedResponseError(LmsError):
    """The LMS answered with something we cannot safely read."""

# Import engines so they register.
from . import canvas  # noqa: E402,F401
