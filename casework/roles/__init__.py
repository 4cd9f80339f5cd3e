"""Role assignment: one current role per user."""

from .models import RoleAssignment
from .repository import RoleRepository
from .service import RoleService

__all__ = ["RoleAssignment", "RoleRepository", "RoleService"]
