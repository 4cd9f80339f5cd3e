from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from casework.core.config import get_settings
from casework.dependencies.services import get_role_service
from casework.permissions import ADMIN_ROLES, STAFF_ROLES, Role
from casework.roles.service import RoleService


class Actor:
    """Authenticated caller: an actor id plus the single role it currently holds."""

    def __init__(self, actor_id: str, role: Role):
        self.actor_id = actor_id
        self.role = role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __repr__(self) -> str:
        return f"Actor(actor_id={self.actor_id!r}, role={self.role.value!r})"


bearer_scheme = HTTPBearer(auto_error=False)


def resolve_actor_id(token: str | None) -> str:
    """Map a bearer token to the actor id issued by the identity provider."""

    if token is None:
        raise HTTPException(status_code=401, detail="Missing authentication credentials")

    actor_id = get_settings().auth_tokens.get(token)
    if actor_id is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")
    return actor_id


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    request: Request,
    roles: Annotated[RoleService, Depends(get_role_service)],
) -> Actor:
    """Authenticate the request and load the caller's current role."""

    cached = getattr(request.state, "actor", None)
    if isinstance(cached, Actor):
        return cached

    token = credentials.credentials if credentials is not None else None
    actor_id = resolve_actor_id(token)
    actor = Actor(actor_id=actor_id, role=await roles.get_role(actor_id))
    request.state.actor = actor
    return actor


def role_required(allowed: Iterable[Role]) -> Callable[[Actor], Actor]:
    """Dependency factory ensuring the current actor holds one of ``allowed``."""

    allowed_roles = frozenset(allowed)

    async def dependency(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
        if actor.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return actor

    return dependency


require_staff = role_required(STAFF_ROLES)
require_admin = role_required(ADMIN_ROLES)

CurrentActor = Annotated[Actor, Depends(get_current_actor)]
StaffActor = Annotated[Actor, Depends(require_staff)]
AdminActor = Annotated[Actor, Depends(require_admin)]
