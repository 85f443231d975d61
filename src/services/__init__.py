"""Services package."""
from src.services import (
    policy_service,
    rbac_service,
    role_service,
    assignment_service,
    rbac_seed_service,
)

__all__ = [
    "assignment_service",
    "policy_service",
    "rbac_seed_service",
    "rbac_service",
    "role_service",
]
