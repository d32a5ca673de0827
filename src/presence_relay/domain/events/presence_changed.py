from __future__ import annotations

from dataclasses import dataclass

from presence_relay.domain.value_objects.ids import ConnectionId, UserId


@dataclass(frozen=True, slots=True)
class PresenceChanged:
    user_id: UserId
    handle: ConnectionId
    online: bool
