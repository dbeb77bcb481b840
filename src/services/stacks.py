# src/services/stacks.py
"""
Stack keys and helpers for the ``stacks`` map of a recipe.

Canonical keys are unversioned (``"prep": 1``). Legacy documents may still
carry ``"<name>@<version>"`` keys; ``migrate_versioned_stack_keys`` folds them
into the canonical form.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

STACK_KEYS: tuple[str, ...] = (
    "prep",
    "equipment",
    "timed",
    "storage",
    "scaling",
    "structured",
    "referenced",
    "illustrated",
)

StacksMap = Mapping[str, Any]


def is_known_stack(key: str) -> bool:
    return key in STACK_KEYS


def is_stack_enabled(stacks: StacksMap, key: str) -> bool:
    """Any value other than None counts as enabled, including 0."""
    return key in stacks and stacks[key] is not None


def enable_stack(stacks: StacksMap, key: str) -> dict[str, Any]:
    return {**stacks, key: 1}


def disable_stack(stacks: StacksMap, key: str) -> dict[str, Any]:
    next_stacks = dict(stacks)
    next_stacks.pop(key, None)
    return next_stacks


def migrate_versioned_stack_keys(
    stacks: StacksMap,
    on_drop: Optional[Callable[[str], None]] = None,
) -> StacksMap:
    """
    Rewrite ``<name>@1`` keys as ``<name>`` and drop every other versioned key.

    An existing unversioned value always wins over its versioned twin. Keys
    with an unknown name or a version other than "1" are removed without
    creating anything; ``on_drop`` is called with each of them.
    Only the first two ``@`` segments are read, so ``prep@1@beta`` counts as ``prep@1``.

    Returns the same object when there is nothing to migrate.
    """
    if not any("@" in key for key in stacks):
        return stacks

    next_stacks = dict(stacks)
    for key in list(next_stacks):
        if "@" not in key:
            continue
        parts = key.split("@")
        base_name, version = parts[0], parts[1]
        del next_stacks[key]
        if is_known_stack(base_name) and version == "1":
            next_stacks.setdefault(base_name, 1)
            continue
        logger.debug("Dropping versioned stack key %r", key)
        if on_drop is not None:
            on_drop(key)

    return next_stacks
