"""
Test Suite for the Gemini Chat Client.

The HTTP layer is a MagicMock standing in for ``requests.Session``.
"""

# Standard Imports
from unittest.mock import MagicMock

# Third-Party Imports
import pytest
import requests

# Internal Imports
from geomaker.assistant import GeminiChatClient, GeminiChatSession
from geomaker.core.config import AssistantConfig
from geomaker.core.exceptions import AssistantRequestError, AssistantUnavailableError


def _reply(text):
    response = MagicMock()
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


@pytest.fixture
def http():
    mock = MagicMock()
    mock.post.return_value = _reply("Hi there")
    return mock


@pytest.fixture
def session(http):
    return GeminiChatSession(http, "https://api.test/models/m:generateContent", "KEY", "be brief", 5.0)


@pytest.mark.unit
def test_send_posts_history_and_instruction(session, http):
    assert session.send("first") == "Hi there"
    http.post.return_value = _reply("Again")
    assert session.send("second") == "Again"

    _, kwargs = http.post.call_args
    assert kwargs["params"] == {"key": "KEY"}
    assert kwargs["timeout"] == 5.0
    payload = kwargs["json"]
    assert payload["system_instruction"] == {"parts": [{"text": "be brief"}]}
    assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
    assert payload["contents"][-1]["parts"][0]["text"] == "second"
    assert len(session.history) == 4


@pytest.mark.unit
def test_http_error_keeps_history(session, http):
    http.post.return_value.raise_for_status.side_effect = requests.HTTPError("500")

    with pytest.raises(AssistantRequestError):
        session.send("hello")

    assert session.history == []


@pytest.mark.unit
def test_connection_error_is_wrapped(session, http):
    http.post.side_effect = requests.ConnectionError("offline")

    with pytest.raises(AssistantRequestError):
        session.send("hello")


@pytest.mark.unit
def test_empty_reply_is_an_error(session, http):
    http.post.return_value.json.return_value = {"candidates": []}

    with pytest.raises(AssistantRequestError):
        session.send("hello")


@pytest.mark.unit
def test_closed_session_refuses(session):
    session.close()

    with pytest.raises(AssistantUnavailableError):
        session.send("hello")


@pytest.mark.unit
def test_client_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEOMAKER_TEST_KEY", raising=False)
    client = GeminiChatClient(AssistantConfig(api_key_env="GEOMAKER_TEST_KEY"), http=MagicMock())

    with pytest.raises(AssistantUnavailableError, match="GEOMAKER_TEST_KEY"):
        client.create_session("instruction")


@pytest.mark.unit
def test_client_builds_model_url(monkeypatch, http):
    monkeypatch.setenv("GEOMAKER_TEST_KEY", "secret")
    config = AssistantConfig(api_key_env="GEOMAKER_TEST_KEY", endpoint="https://api.test/v1/", model="gem")

    chat = GeminiChatClient(config, http=http).create_session("instruction")
    chat.send("ping")

    args, kwargs = http.post.call_args
    assert args[0] == "https://api.test/v1/models/gem:generateContent"
    assert kwargs["params"] == {"key": "secret"}
