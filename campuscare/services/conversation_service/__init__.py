"""Conversation Service: per-session bounded context window."""

from .window import DEFAULT_MAX_MESSAGES, ConversationWindow

__all__ = ["DEFAULT_MAX_MESSAGES", "ConversationWindow"]
