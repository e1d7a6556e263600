"""Utilities module."""

from .llm import (
    call_chat_completion_async,
    build_messages,
)

__all__ = [
    'call_chat_completion_async',
    'build_messages',
]
