# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Read-only accessors for the capability registry."""

from collections.abc import Iterable

from src.rbac.capabilities import CAPABILITIES, CAPABILITY_REGISTRY, CapabilityDefinition
from src.rbac.errors import CapabilityNotFoundError, InvalidCapabilityError


def get_all() -> list[CapabilityDefinition]:
    """Return every registered capability in catalog order."""
    return list(CAPABILITIES)


def get_by_key(key: str) -> CapabilityDefinition:
    """Return the capability registered under ``key``.

    Raises:
        CapabilityNotFoundError: If the key is not registered.
    """
    try:
        return CAPABILITY_REGISTRY[key]
    except KeyError:
        raise CapabilityNotFoundError(key) from None


def is_registered(key: str) -> bool:
    """Check whether ``key`` is a registered capability."""
    return key in CAPABILITY_REGISTRY


def get_by_module(module: str) -> list[CapabilityDefinition]:
    """Return the capabilities of one module (empty for unknown modules)."""
    return [definition for definition in CAPABILITIES if definition.module == module]


def get_modules() -> list[str]:
    """Return module names in the order they first appear in the catalog."""
    return list(dict.fromkeys(definition.module for definition in CAPABILITIES))


def get_blocked_keys() -> set[str]:
    """Keys that only SYSTEM roles may grant."""
    return {d.key for d in CAPABILITIES if d.blocked_for_custom_roles}


def get_policy_controlled_keys() -> list[str]:
    """Keys that organizations may enable or disable, in catalog order."""
    return [d.key for d in CAPABILITIES if d.can_be_policy_controlled]


def validate_keys(keys: Iterable[str]) -> None:
    """Ensure every key is registered.

    Raises:
        InvalidCapabilityError: Listing every unknown key, in input order.
    """
    unknown = [key for key in dict.fromkeys(keys) if key not in CAPABILITY_REGISTRY]
    if unknown:
        raise InvalidCapabilityError(unknown)


def find_blocked_keys(keys: Iterable[str]) -> list[str]:
    """Return the keys (in input order) that are blocked for custom roles."""
    return [
        key
        for key in dict.fromkeys(keys)
        if key in CAPABILITY_REGISTRY
        and CAPABILITY_REGISTRY[key].blocked_for_custom_roles
    ]
