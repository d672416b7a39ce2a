"""
Member model for a group roster.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import NewType, Optional
from datetime import datetime, timezone
import enum

MemberId = NewType("MemberId", str)


class MemberRole(str, enum.Enum):
    """Member role enumeration."""
    ADMIN = "admin"
    MEMBER = "member"


class Member(BaseModel):
    """A roster entry referencing an identity owned by the user directory."""
    model_config = ConfigDict(frozen=True)

    id: MemberId
    name: str = ""
    email: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
