from __future__ import annotations

from dataclasses import dataclass

from presence_relay.application.exceptions import AlreadyBoundError
from presence_relay.domain.value_objects.ids import ConnectionId, UserId


@dataclass(slots=True)
class Session:
    """One live connection; bound to a user identity at most once."""

    handle: ConnectionId
    bound_user_id: UserId | None = None

    @property
    def is_bound(self) -> bool:
        return self.bound_user_id is not None

    def bind(self, user_id: UserId) -> None:
        if self.bound_user_id is not None and self.bound_user_id != user_id:
            raise AlreadyBoundError(
                f"session {self.handle} is already bound to {self.bound_user_id}"
            )
        self.bound_user_id = user_id
