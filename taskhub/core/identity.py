"""
The identity every service call acts on behalf of.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ActingUser:
    """Authenticated caller: stable user id, email and display name."""
    id: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        """Name shown to teammates; falls back to the email's local part."""
        return self.display_name or self.email.split("@")[0]

    @classmethod
    def from_user(cls, user) -> "ActingUser":
        return cls(id=user.id, email=user.email, display_name=user.display_name or user.name)
