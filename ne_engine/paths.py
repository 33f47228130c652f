"""Materialized-path helpers for resource ancestry.

Paths look like ``root.<label>.<label>``; a label is a resource id with ``-``
replaced by ``_`` because the path syntax reserves ``-``.
"""

from __future__ import annotations

ROOT_LABEL = "root"
PATH_SEPARATOR = "."


def ltree_label(resource_id: str) -> str:
    """Return the path-safe label for a resource id."""
    return str(resource_id).replace("-", "_").replace(PATH_SEPARATOR, "_")


def compute_path(resource_id: str, parent_path: str | None = None) -> str:
    """Compute the materialized path of a resource below ``parent_path``."""
    label = ltree_label(resource_id)
    if not parent_path:
        return f"{ROOT_LABEL}{PATH_SEPARATOR}{label}"
    return f"{parent_path}{PATH_SEPARATOR}{label}"


def depth_from_path(path: str) -> int:
    """Depth below the root segment: ``root.a.b`` -> 2."""
    segments = [segment for segment in path.split(PATH_SEPARATOR) if segment]
    return max(0, len(segments) - 1)


def is_descendant_path(path: str, prefix: str) -> bool:
    """True when ``path`` equals ``prefix`` or lies below it (ltree ``<@``)."""
    if path == prefix:
        return True
    return path.startswith(prefix + PATH_SEPARATOR)


def rebase_path(path: str, old_prefix: str, new_prefix: str) -> str:
    """Replace the ``old_prefix`` ancestry of ``path`` with ``new_prefix``."""
    if not is_descendant_path(path, old_prefix):
        raise ValueError(f"Path {path!r} is not below {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]
