"""Bounded conversation context window.

Keeps the most recent N messages of a session in insertion order. The
window belongs to the calling session; flows only ever see a snapshot.
"""
from collections import deque
from typing import Any, Dict, Iterable, Iterator, Tuple, Union

from campuscare.shared.models import Message

DEFAULT_MAX_MESSAGES = 5

MessageLike = Union[Message, Dict[str, Any]]


def _as_message(item: MessageLike) -> Message:
    if isinstance(item, Message):
        return item
    if isinstance(item, dict):
        return Message.from_dict(item)
    raise TypeError(f"Expected Message or dict, got {type(item).__name__}")


class ConversationWindow:
    """Most recent ``max_messages`` messages, oldest first.

    A zero-size window drops every message.

    Not thread-safe; callers serialize access per session.
    """

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES):
        if max_messages < 0:
            raise ValueError("max_messages must be >= 0")
        self.max_messages = max_messages
        self._messages: deque = deque(maxlen=max_messages)

    @classmethod
    def from_messages(
        cls,
        messages: Iterable[MessageLike],
        max_messages: int = DEFAULT_MAX_MESSAGES,
    ) -> "ConversationWindow":
        window = cls(max_messages)
        window.extend(messages)
        return window

    def append(self, message: MessageLike) -> None:
        """Add a message, evicting the oldest once full.

        Raises:
            ValueError: If a dict message has an unknown role
        """
        self._messages.append(_as_message(message))

    def extend(self, messages: Iterable[MessageLike]) -> None:
        for message in messages:
            self.append(message)

    def snapshot(self) -> Tuple[Message, ...]:
        """Immutable copy of the current window."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())
