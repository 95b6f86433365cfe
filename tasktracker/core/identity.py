"""
Actor identity as carried by a session token.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Identity:
    """
    Who is making a request.

    Attributes:
        id: User id (string form of the user's UUID)
        display_name: Name shown in the UI, may be empty
        email: Login email, may be empty
        roles: Role names, e.g. {"Admin"} or {"User"}
    """

    id: str
    display_name: str = ""
    email: str = ""
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        """Presentation name: display name, falling back to email, then id."""
        return self.display_name or self.email or self.id

    def has_role(self, role: str) -> bool:
        return role in self.roles


def actor_id(actor: Optional[Identity]) -> Optional[str]:
    """Return the actor's id, or None for anonymous callers."""
    if actor is None or not actor.id:
        return None
    return actor.id
