# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Cache of resolved effective permissions."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import TYPE_CHECKING, ClassVar

from src.config import settings

if TYPE_CHECKING:
    from src.services.rbac_service import EffectivePermission

logger = logging.getLogger(__name__)

CacheKey = tuple[uuid.UUID, uuid.UUID, uuid.UUID | None, str | None]


class EffectivePermissionCache:
    """Bounded cache keyed by (organization, user, site, module).

    Any RBAC write invalidates every entry of the written organization.
    Entries are immutable values, and ``get`` hands out a fresh dict so
    callers cannot alter cached state.
    """

    _instance: ClassVar[EffectivePermissionCache | None] = None

    def __init__(self, max_entries: int, enabled: bool = True) -> None:
        """Initialize the cache.

        Args:
            max_entries: Oldest entries are evicted beyond this size.
            enabled: When False, get() always misses and put() is a no-op.
        """
        self.max_entries = max_entries
        self.enabled = enabled
        self._entries: OrderedDict[CacheKey, dict[str, EffectivePermission]] = (
            OrderedDict()
        )
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EffectivePermissionCache:
        """Get the singleton instance configured from settings."""
        if cls._instance is None:
            cls._instance = cls(
                max_entries=settings.effective_cache_max_entries,
                enabled=settings.effective_cache_enabled,
            )
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    def get(self, key: CacheKey) -> dict[str, EffectivePermission] | None:
        """Return a copy of the cached result, or None on a miss."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return dict(entry)

    def put(self, key: CacheKey, value: dict[str, EffectivePermission]) -> None:
        """Store a resolved result."""
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = dict(value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate_org(self, organization_id: uuid.UUID) -> int:
        """Drop every entry of an organization. Returns the number removed."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == organization_id]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(
                f"Invalidated {len(stale)} cached results for org {organization_id}"
            )
        return len(stale)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def invalidate_organization(organization_id: uuid.UUID) -> None:
    """Drop cached results of an organization after an RBAC write."""
    EffectivePermissionCache.get_instance().invalidate_org(organization_id)
