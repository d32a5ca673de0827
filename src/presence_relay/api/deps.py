"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from presence_relay.container import RelayContainer


def get_relay(request: Request) -> RelayContainer:
    return request.app.state.relay


RelayDep = Annotated[RelayContainer, Depends(get_relay)]
