"""
Assistant Package.

Conversational collaborator grounded on the session context.
"""

from .client import ChatClientProtocol, ChatSessionProtocol, GeminiChatClient, GeminiChatSession
from .conversation import (
    INIT_FAILURE_TEXT,
    NOT_READY_TEXT,
    SEND_FAILURE_TEXT,
    AssistantConversation,
    ChatMessage,
    build_greeting,
    build_system_instruction,
    extract_domain_hint,
    needs_research,
    research_log,
)

__all__ = [
    "INIT_FAILURE_TEXT",
    "NOT_READY_TEXT",
    "SEND_FAILURE_TEXT",
    "ChatClientProtocol",
    "ChatSessionProtocol",
    "GeminiChatClient",
    "GeminiChatSession",
    "AssistantConversation",
    "ChatMessage",
    "build_greeting",
    "build_system_instruction",
    "extract_domain_hint",
    "needs_research",
    "research_log",
]
