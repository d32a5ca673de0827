from __future__ import annotations

from fastapi import APIRouter

from presence_relay.api.deps import RelayDep
from presence_relay.domain.value_objects.ids import UserId

router = APIRouter(prefix="/api/v1/presence", tags=["presence"])


@router.get("")
async def list_online(relay: RelayDep) -> dict[str, list[str]]:
    return {"online": relay.registry.snapshot()}


@router.get("/{user_id}")
async def get_status(user_id: str, relay: RelayDep) -> dict[str, object]:
    return {"userId": user_id, "online": relay.registry.is_online(UserId(user_id))}
