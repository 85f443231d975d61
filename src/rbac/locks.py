# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Per-organization locks serializing RBAC writes and resolver reads."""

import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import ClassVar


class OrgLockRegistry:
    """Hands out one re-entrant lock per organization.

    Writers hold the lock from validation until commit. The resolver holds it
    while loading its inputs, so it never observes a half-applied write made
    by this process.
    """

    _instance: ClassVar["OrgLockRegistry | None"] = None

    def __init__(self) -> None:
        """Initialize the lock registry."""
        self._locks: dict[uuid.UUID, threading.RLock] = {}
        self._guard = threading.Lock()

    @classmethod
    def get_instance(cls) -> "OrgLockRegistry":
        """Get the singleton instance of the registry."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    def get_lock(self, organization_id: uuid.UUID) -> threading.RLock:
        """Return the lock for an organization, creating it on first use."""
        with self._guard:
            lock = self._locks.get(organization_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[organization_id] = lock
            return lock


@contextmanager
def org_lock(organization_id: uuid.UUID) -> Iterator[None]:
    """Hold the organization's lock for the duration of the block."""
    lock = OrgLockRegistry.get_instance().get_lock(organization_id)
    with lock:
        yield
