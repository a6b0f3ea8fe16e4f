"""Structural merge of JSON-like configuration trees.

Two policies share one traversal:

- PRESERVE only fills keys that are absent from the target, so values a
  user already set (including ``None`` and ``False``) survive.
- FORCE always writes scalar and list values from the source.

Under both policies a mapping in the source is merged key by key into the
target, replacing whatever non-mapping value the target held at that key.
Lists are atomic values and are never merged element-wise.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any

ConfigTree = dict[str, Any]


class MergePolicy(str, Enum):
    """Conflict resolution for scalar and list values."""

    PRESERVE = "preserve"
    FORCE = "force"


def merge(target: ConfigTree, source: ConfigTree, policy: MergePolicy) -> ConfigTree:
    """Merge ``source`` into ``target`` in place and return ``target``."""
    for key, value in source.items():
        if isinstance(value, dict):
            if not isinstance(target.get(key), dict):
                target[key] = {}
            merge(target[key], value, policy)
        elif isinstance(value, list):
            if policy is MergePolicy.FORCE or key not in target:
                target[key] = copy.deepcopy(value)
        elif policy is MergePolicy.FORCE or key not in target:
            target[key] = value
    return target


def preserve_merge(target: ConfigTree, source: ConfigTree) -> ConfigTree:
    """Fill in missing keys from ``source`` without overwriting anything."""
    return merge(target, source, MergePolicy.PRESERVE)


def force_merge(target: ConfigTree, source: ConfigTree) -> ConfigTree:
    """Write every scalar and list from ``source`` over ``target``."""
    return merge(target, source, MergePolicy.FORCE)
