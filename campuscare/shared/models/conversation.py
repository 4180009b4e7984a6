"""Conversation message model."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Role(Enum):
    """Author of a conversation message."""
    USER = "user"
    COUNSELOR = "counselor"

    @property
    def label(self) -> str:
        return "User" if self is Role.USER else "Counselor"


@dataclass(frozen=True)
class Message:
    """A single conversation turn.

    Immutable once created - produced by the caller or by a flow's output.
    """
    role: Role
    content: str
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.role, Role):
            raise ValueError(f"role must be a Role, got {self.role!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Build a message from its wire form.

        Args:
            data: ``{"role": "user"|"counselor", "content": str,
                "timestamp": optional ISO-8601 str}``

        Raises:
            ValueError: On an unknown role, non-string content or a
                timestamp that is not an ISO-8601 string
        """
        try:
            role = Role(data.get("role"))
        except ValueError:
            raise ValueError(f"Unknown message role: {data.get('role')!r}") from None

        content = data.get("content", "")
        if not isinstance(content, str):
            raise ValueError(f"Message content must be a string, got {type(content).__name__}")

        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            try:
                timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
            except ValueError:
                raise ValueError(f"Invalid message timestamp: {timestamp!r}") from None
        elif timestamp is not None and not isinstance(timestamp, datetime):
            raise ValueError(
                f"Message timestamp must be an ISO-8601 string, got {type(timestamp).__name__}"
            )

        return cls(role=role, content=content, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp.isoformat()
        return result

    def to_prompt_line(self) -> str:
        return f"{self.role.label}: {self.content}"
