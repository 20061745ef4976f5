"""Enums for model fields."""

from enum import Enum


class Gender(str, Enum):
    """Gender options on a user profile."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

    @property
    def default_avatar_url(self) -> str:
        """Externally hosted avatar assigned at registration."""
        return f"https://api.dicebear.com/7.x/thumbs/svg?seed={self.value}"
