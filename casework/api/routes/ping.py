from fastapi import APIRouter

from casework.dependencies.auth import CurrentActor

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Public health check")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/whoami", summary="Resolve the authenticated actor")
async def whoami(actor: CurrentActor) -> dict[str, str]:
    return {"actor_id": actor.actor_id, "role": actor.role.value}
