# utils/key_path.py
"""Nested-path helpers for JSON documents.

A path is either a list of segments or a string split on "." and "/"
("grades.0.courseName" and "grades/0/courseName" are the same path). Empty
segments are dropped.

``set_nested`` and ``delete_nested`` never touch the document they are
given: they copy each container along the path and return a new document,
sharing every untouched branch with the original.
"""
from __future__ import annotations

import re
from typing import Any, List, Sequence, Union

KeyPath = Union[str, Sequence[str], None]

_SPLIT = re.compile(r"[./]")
_MISSING = object()


def parse_key_path(path: KeyPath) -> List[str]:
    if not path:
        return []
    if isinstance(path, str):
        return [seg for seg in _SPLIT.split(path) if seg]
    return [str(seg) for seg in path if str(seg)]


def _child(node: Any, segment: str) -> Any:
    if isinstance(node, dict):
        return node.get(segment, _MISSING)
    if isinstance(node, list) and segment.isdigit():
        index = int(segment)
        return node[index] if index < len(node) else _MISSING
    return _MISSING


def get_nested(doc: Any, path: KeyPath, default: Any = None) -> Any:
    node = doc
    for segment in parse_key_path(path):
        node = _child(node, segment)
        if node is _MISSING:
            return default
    return node


def _is_container(node: Any) -> bool:
    return isinstance(node, (dict, list))


def _list_index(segment: str) -> int:
    if not segment.isdigit():
        raise ValueError(f"list segment must be an index, got {segment!r}")
    return int(segment)


def set_nested(doc: Any, path: KeyPath, value: Any) -> Any:
    """Return a copy of ``doc`` with ``value`` stored at ``path``.

    Lists are containers: a digit segment indexes into them, and a list
    shorter than the index is padded with None. Intermediate nodes that are
    missing or scalar are replaced by fresh objects, and so is a scalar or
    missing root.
    """
    segments = parse_key_path(path)
    if not segments:
        raise ValueError("cannot set the document root through a key path")

    def _set(node: Any, rest: List[str]) -> Any:
        head = rest[0]
        if isinstance(node, list):
            updated: Any = list(node)
            index = _list_index(head)
            if index >= len(updated):
                updated.extend([None] * (index + 1 - len(updated)))
            current = updated[index]
        else:
            updated = dict(node) if isinstance(node, dict) else {}
            current = updated.get(head)
            index = head
        if len(rest) == 1:
            updated[index] = value
        else:
            updated[index] = _set(current if _is_container(current) else None, rest[1:])
        return updated

    return _set(doc, segments)


def delete_nested(doc: Any, path: KeyPath) -> Any:
    """Return a copy of ``doc`` without the leaf at ``path``.

    A list element is blanked to None rather than removed, so the indices of
    its siblings do not move. If the leaf or any of its parents is absent,
    ``doc`` is returned as is.
    """
    segments = parse_key_path(path)
    if not segments:
        return doc

    def _delete(node: Any, rest: List[str]) -> Any:
        if _child(node, rest[0]) is _MISSING:
            return node
        head = rest[0]
        key: Any = int(head) if isinstance(node, list) else head
        updated: Any = list(node) if isinstance(node, list) else dict(node)
        if len(rest) == 1:
            if isinstance(updated, list):
                updated[key] = None
            else:
                del updated[key]
            return updated
        child = _delete(node[key], rest[1:])
        if child is node[key]:
            return node
        updated[key] = child
        return updated

    return _delete(doc, segments)
