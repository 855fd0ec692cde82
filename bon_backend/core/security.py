from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status


# ------------------------------
# Actor identity is resolved upstream (gateway / auth service) and
# forwarded as headers; this layer only gates on the role.
# ------------------------------
PRIVILEGED_ROLES = {"admin"}


@dataclass(frozen=True)
class Actor:
    actor_id: int
    role: str


def get_actor(
        x_actor_id: Optional[int] = Header(None),
        x_actor_role: Optional[str] = Header(None),
) -> Optional[Actor]:
    if x_actor_id is None:
        return None
    return Actor(actor_id=x_actor_id, role=(x_actor_role or "").strip().lower())


def require_privileged_actor(
        x_actor_id: Optional[int] = Header(None),
        x_actor_role: Optional[str] = Header(None),
) -> Actor:
    actor = get_actor(x_actor_id, x_actor_role)
    if actor is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Actor headers missing")
    if actor.role not in PRIVILEGED_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Privileged role required")
    return actor
