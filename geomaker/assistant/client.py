"""
Generative Chat Client.

Thin boundary around the external text-generation service. The rest of
the package only sees ``ChatClientProtocol``/``ChatSessionProtocol``; the
default implementation talks to the Gemini ``generateContent`` REST
endpoint through ``requests`` and keeps the conversation history itself,
since the endpoint is stateless.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from typing import Any, Dict, List, Optional, Protocol

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import requests

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config import AssistantConfig
from geomaker.core.exceptions import AssistantRequestError, AssistantUnavailableError
from geomaker.core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class ChatSessionProtocol(Protocol):
    def send(self, message: str) -> str: ...  # pragma: no cover

    def close(self) -> None: ...  # pragma: no cover


class ChatClientProtocol(Protocol):
    def create_session(self, system_instruction: str) -> ChatSessionProtocol: ...  # pragma: no cover


class GeminiChatSession:
    """
    One conversation against the generateContent endpoint.

    The history is replayed on every request; a failed request leaves it
    untouched so the user can retry.
    """

    def __init__(
        self,
        http: requests.Session,
        url: str,
        api_key: str,
        system_instruction: str,
        timeout: float,
    ):
        self._http = http
        self._url = url
        self._api_key = api_key
        self._system_instruction = system_instruction
        self._timeout = timeout
        self._history: List[Dict[str, Any]] = []
        self._closed = False

    @property
    def history(self) -> List[Dict[str, Any]]:
        return list(self._history)

    def _payload(self, message: str) -> Dict[str, Any]:
        return {
            "system_instruction": {"parts": [{"text": self._system_instruction}]},
            "contents": self._history + [{"role": "user", "parts": [{"text": message}]}],
        }

    def send(self, message: str) -> str:
        """
        Sends one user turn and returns the model reply.

        Raises:
            AssistantUnavailableError: The session was closed.
            AssistantRequestError: Transport failure, HTTP error or empty reply.
        """
        if self._closed:
            raise AssistantUnavailableError("Chat session is closed.")

        try:
            response = self._http.post(
                self._url,
                params={"key": self._api_key},
                json=self._payload(message),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AssistantRequestError(f"Assistant request failed: {e}") from e

        reply = _extract_text(body)
        if not reply:
            raise AssistantRequestError("Assistant returned an empty response.")

        self._history.append({"role": "user", "parts": [{"text": message}]})
        self._history.append({"role": "model", "parts": [{"text": reply}]})
        return reply

    def close(self) -> None:
        self._closed = True
        self._history.clear()


def _extract_text(body: Dict[str, Any]) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()


class GeminiChatClient:
    """
    Factory for Gemini chat sessions.

    Args:
        config: Endpoint, model and API key lookup.
        http: Optional pre-built ``requests.Session`` (injected in tests).
    """

    def __init__(self, config: Optional[AssistantConfig] = None, http: Optional[requests.Session] = None):
        self.config = config or AssistantConfig()
        self._http = http

    def create_session(self, system_instruction: str) -> GeminiChatSession:
        api_key = self.config.resolve_api_key()
        if api_key is None:
            raise AssistantUnavailableError(
                f"No API key found: set the {self.config.api_key_env} environment variable."
            )
        if self._http is None:
            self._http = requests.Session()

        url = f"{self.config.endpoint.rstrip('/')}/models/{self.config.model}:generateContent"
        logger.debug(f"Opening chat session on model {self.config.model}")
        return GeminiChatSession(
            self._http, url, api_key, system_instruction, self.config.timeout
        )
