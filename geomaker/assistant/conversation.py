"""
Assistant Conversation.

Owns the external chat session handle and the visible message list. The
assistant is grounded on the session context text; it never mutates
orchestration state beyond reporting a newly declared domain hint through
the ``on_domain_hint`` callback.

Lifecycle:
    1. ``initialize(context)`` opens a session and posts the greeting
    2. ``send(text, context_provider)`` extracts a domain hint, reopens the
       session when it changes, simulates the research-agent log and relays
       the message
    3. ``reset()`` closes the handle and forgets the conversation

Failures never raise out of ``initialize``/``send``: they surface as
system-role messages.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config import AssistantConfig
from geomaker.core.exceptions import AssistantError, AssistantUnavailableError
from geomaker.core.paths import LOGGER_NAME
from geomaker.session.context import SessionContext

from .client import ChatClientProtocol, ChatSessionProtocol, GeminiChatClient

logger = logging.getLogger(LOGGER_NAME)

ROLE_USER = "user"
ROLE_MODEL = "model"
ROLE_SYSTEM = "system"

DOMAIN_KEYWORDS = (
    "classification of",
    "image type is",
    "i am analyzing",
    "my dataset is about",
    "focus is on",
    "goal is",
    "problem of",
    "working with",
    "dataset for",
    "images of",
)

RESEARCH_KEYWORDS = (
    "articles",
    "research",
    "advances",
    "multidisciplinary",
    "literature",
    "recent studies",
    "trends in",
)

INIT_FAILURE_TEXT = "Failed to initialize the assistant. Check the log for details."
SEND_FAILURE_TEXT = "Sorry, an error occurred while getting a response from the assistant."
NOT_READY_TEXT = (
    "Sorry, I cannot process your message: the assistant was not initialized. "
    "Check that the API key is configured."
)


@dataclass(frozen=True)
class ChatMessage:
    role: str
    text: str
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


# ==================== Text Helpers ====================


def extract_domain_hint(text: str) -> Optional[str]:
    """
    Finds a declared classification domain in free text.

    The phrase following the first matching keyword is kept up to a
    ", and" clause, stripped of a trailing period or question mark and
    title-cased word by word. Only phrases of 3 to 99 characters qualify.

    >>> extract_domain_hint("My dataset is about skin lesions.")
    'Skin Lesions'
    """
    lowered = text.lower()
    for keyword in DOMAIN_KEYWORDS:
        position = lowered.find(keyword)
        if position < 0:
            continue
        candidate = lowered[position + len(keyword):].strip()
        candidate = re.sub(r", and.*$", "", candidate)
        candidate = re.sub(r"\.$", "", candidate)
        candidate = re.sub(r"\?$", "", candidate).strip()
        if 2 < len(candidate) < 100:
            return " ".join(word[:1].upper() + word[1:] for word in candidate.split(" "))
    return None


def needs_research(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in RESEARCH_KEYWORDS)


def research_log(domain_hint: str, query: str, now: datetime) -> List[str]:
    """Simulated research-agent trace shown while the reply is produced."""
    stamp = now.strftime("%H:%M:%S")
    return [
        f"[{stamp}] INFO: User query suggests in-depth research.",
        f'[{stamp}] AGENT_SYSTEM: Activating research agent specialized in "{domain_hint}".',
        f'[{stamp}] AGENT_WEB_QUERY: Searching articles and data on "AI for {domain_hint}" '
        f'and "{query[:30]}...".',
        f"[{stamp}] AGENT_ANALYSIS: Processing and synthesizing information from multiple sources...",
        f"[{stamp}] AGENT_SYSTEM: Synthesis complete. Preparing response...",
    ]


def build_system_instruction(context: SessionContext, persona: str) -> str:
    return (
        f"You are {persona}, an assistant specialized in AI and data science. Your goal is to "
        "analyze the results of an image classification model and answer questions about them. "
        "The results of the current run are provided below as a textual summary that includes a "
        "JSON block with the key configuration and performance data, plus further details in text "
        "and CSV-like tables.\n\n"
        f"Results context:\n{context.text}\n"
        "Additional instructions:\n"
        "- Use the JSON block for a quick overview and the text/CSV details for finer information.\n"
        "- If the domain in the context is unknown and the question would benefit from it "
        "(e.g. how to improve the model), ask the user what kind of classification they are "
        "performing. Otherwise answer with the information available.\n"
        "- Be clear, concise and helpful. If results are missing or insufficient, tell the user "
        "to train a model first or to provide more details.\n"
        "- If the user asks for something that requires external research (e.g. recent advances), "
        "simulate activating research agents and then give a comprehensive answer based on your "
        "knowledge and the context."
    )


def build_greeting(context: SessionContext, persona: str, domain_hint: Optional[str]) -> str:
    opening = f"Hello! I am {persona}, your AI assistant."
    if not context.has_results:
        return (
            f"{opening} I am here to help analyze your model's results, discuss image "
            "characteristics or explain AI concepts.\n\n"
            "No results from this session are loaded yet. If you already ran a training, try "
            "refreshing the context. Otherwise start a run so I can analyze the generated data, "
            "or we can talk about AI in general!"
        )

    text = f"{opening} Your session results "
    sections = context.available_sections
    if sections:
        text += f"(including {', '.join(sections)}) "
    text += "and the model configuration are loaded in my context. "
    if domain_hint:
        text += f'Your stated focus is "{domain_hint}". '
    else:
        text += (
            "For a more targeted analysis, tell me what kind of classification you are "
            "performing (e.g. medical diagnosis, geology). "
        )
    return text + "How can I help with the analysis today?"


# ==================== Conversation ====================


class AssistantConversation:
    """
    Message list plus the lifetime of one external chat session.

    Args:
        client: Chat session factory (defaults to the Gemini REST client).
        config: Persona and connection settings.
        on_domain_hint: Called with every newly extracted domain hint.
        clock: Timestamp source for the agent log.
    """

    def __init__(
        self,
        client: Optional[ChatClientProtocol] = None,
        config: Optional[AssistantConfig] = None,
        on_domain_hint: Optional[Callable[[Optional[str]], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or AssistantConfig()
        self.client = client if client is not None else GeminiChatClient(self.config)
        self.on_domain_hint = on_domain_hint
        self._clock = clock

        self._session: Optional[ChatSessionProtocol] = None
        self._messages: List[ChatMessage] = []
        self.agent_log: List[str] = []
        self.domain_hint: Optional[str] = None
        self.is_loading = False

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def initialize(
        self, context: SessionContext, force_refresh: bool = False
    ) -> Optional[ChatSessionProtocol]:
        """
        Opens the chat session (or returns the open one) and posts the greeting.

        ``force_refresh`` discards the open session and restarts the visible
        conversation from the greeting.
        """
        if self._session is not None and not force_refresh:
            return self._session
        return self._open(context, replace_history=force_refresh)

    def send(self, text: str, context_provider: Callable[[], SessionContext]) -> ChatMessage:
        """
        Relays one user message and returns the message appended in reply.

        Raises:
            ValueError: Empty message.
        """
        text = text.strip()
        if not text:
            raise ValueError("Cannot send an empty message.")

        self._messages.append(ChatMessage(role=ROLE_USER, text=text))
        self.is_loading = True
        self.agent_log = []
        try:
            session = self._session
            hint = extract_domain_hint(text) if not self.domain_hint else None
            if hint and hint != self.domain_hint:
                self.domain_hint = hint
                logger.info(f"Domain hint set to '{hint}'")
                if self.on_domain_hint is not None:
                    self.on_domain_hint(hint)
                session = self._open(context_provider(), replace_history=False)
            elif session is None:
                session = self._open(context_provider(), replace_history=False)

            if session is None:
                return self._append(ROLE_SYSTEM, NOT_READY_TEXT)

            if self.domain_hint and needs_research(text):
                self.agent_log = research_log(self.domain_hint, text, self._clock())

            try:
                reply = session.send(text)
            except AssistantError as e:
                logger.warning(f"Assistant reply failed: {e}")
                return self._append(ROLE_SYSTEM, SEND_FAILURE_TEXT)
            return self._append(ROLE_MODEL, reply)
        finally:
            self.is_loading = False

    def reset(self) -> None:
        """Closes the handle and forgets messages, agent log and domain hint."""
        self._close()
        self._messages = []
        self.agent_log = []
        self.domain_hint = None
        self.is_loading = False

    # ==================== Internals ====================

    def _open(self, context: SessionContext, replace_history: bool) -> Optional[ChatSessionProtocol]:
        self._close()
        self.is_loading = True
        self.agent_log = []
        try:
            session = self.client.create_session(
                build_system_instruction(context, self.config.assistant_name)
            )
        except AssistantUnavailableError as e:
            logger.warning(f"Assistant disabled: {e}")
            self._messages = [ChatMessage(role=ROLE_SYSTEM, text=str(e))]
            return None
        except AssistantError as e:
            logger.error(f"Assistant initialization failed: {e}")
            self._messages = [ChatMessage(role=ROLE_SYSTEM, text=INIT_FAILURE_TEXT)]
            return None
        finally:
            self.is_loading = False

        self._session = session
        greeting = ChatMessage(
            role=ROLE_MODEL,
            text=build_greeting(context, self.config.assistant_name, self.domain_hint),
        )
        last = self._messages[-1] if self._messages else None
        if replace_history or last is None or last.role == ROLE_SYSTEM:
            self._messages = [greeting]
        elif not (last.role == ROLE_MODEL and last.text == greeting.text):
            self._messages.append(greeting)
        return session

    def _close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _append(self, role: str, text: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text)
        self._messages.append(message)
        return message
