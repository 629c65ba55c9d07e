"""Unit tests for the assistant bridge, conversation and client."""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
import pytz
from openai import OpenAIError

from glucose_log.domain.conversation import MessageRole
from glucose_log.domain.entry import GlucoseEntry, Language
from glucose_log.infrastructure.assistant.client import AssistantClient
from glucose_log.infrastructure.storage.local_storage import LocalStorage
from glucose_log.services.app_state import AppState
from glucose_log.services.assistant import (
    SYSTEM_INSTRUCTION,
    AssistantBridge,
    Conversation,
    build_context,
)
from glucose_log.services.entry_store import EntryStore
from glucose_log.services.preferences import PreferenceStore
from glucose_log.utils.exceptions import AssistantServiceError
from glucose_log.utils.parameters import AssistantConfig, StorageConfig

BASE = datetime(2024, 3, 1, 8, 0, 0, tzinfo=pytz.UTC)


class FakeClient:
    """Completion client returning a canned reply and recording calls."""

    def __init__(self, reply: str = "Looking good.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(self, instructions: str, prompt: str) -> str:
        self.calls.append((instructions, prompt))
        if self.error is not None:
            raise self.error
        return self.reply


def make_entries(count: int) -> list[GlucoseEntry]:
    return [
        GlucoseEntry(id=f"e{i}", value=round(5.0 + i / 10, 1), timestamp=BASE + timedelta(hours=i))
        for i in range(count)
    ]


def make_state(tmp_path: Path) -> AppState:
    storage = LocalStorage(StorageConfig(data_dir=str(tmp_path / "data")))
    state = AppState(
        EntryStore(storage, "blood_sugar_logs"),
        PreferenceStore(storage, "blood_sugar_lang"),
        "UTC",
    )
    state.load()
    return state


def test_build_context_limits_to_most_recent() -> None:
    """Test that only the 20 newest entries are rendered, newest first."""
    context = build_context(make_entries(25))
    lines = context.splitlines()

    if len(lines) != 20:
        raise AssertionError(f"Expected 20 lines, got {len(lines)}")
    if lines[0] != "2024-03-02T08:00:00Z: 7.4 mmol/L":
        raise AssertionError(f"Unexpected first line: {lines[0]!r}")
    if lines[-1] != "2024-03-01T13:00:00Z: 5.5 mmol/L":
        raise AssertionError(f"Unexpected last line: {lines[-1]!r}")


def test_build_context_keeps_full_value_precision() -> None:
    """Test that values are rendered without truncating significant digits."""
    entry = GlucoseEntry(id="p", value=12.3456789, timestamp=BASE)

    context = build_context([entry])

    if context != "2024-03-01T08:00:00Z: 12.3456789 mmol/L":
        raise AssertionError(f"Unexpected context line: {context!r}")


def test_ask_returns_reply_verbatim() -> None:
    """Test that a successful reply is returned unchanged with full request content."""
    client = FakeClient(reply="  Your average is stable.  ")
    bridge = AssistantBridge(client)

    answer = bridge.ask("How is my average?", make_entries(3), Language.ENGLISH)

    if answer != "  Your average is stable.  ":
        raise AssertionError(f"Expected verbatim reply, got {answer!r}")
    if len(client.calls) != 1:
        raise AssertionError(f"Expected one request, got {len(client.calls)}")
    instructions, prompt = client.calls[0]
    if instructions != SYSTEM_INSTRUCTION:
        raise AssertionError("Expected fixed system instruction")
    if "How is my average?" not in prompt or "5.2 mmol/L" not in prompt:
        raise AssertionError(f"Expected query and data in prompt: {prompt!r}")


def test_ask_empty_reply_is_localized() -> None:
    """Test the fallback for an empty service response."""
    bridge = AssistantBridge(FakeClient(reply=""))

    if bridge.ask("?", [], Language.ENGLISH) != "Could not generate a response.":
        raise AssertionError("Expected English no-response message")
    if bridge.ask("?", [], Language.DANISH) != "Kunne ikke generere et svar.":
        raise AssertionError("Expected Danish no-response message")


def test_ask_failure_returns_localized_error(tmp_path: Path) -> None:
    """Test that a throwing client yields the fallback and leaves the store alone."""
    state = make_state(tmp_path)
    state.store.add(6.0, BASE)
    before = state.entries
    stored_before = (tmp_path / "data" / "blood_sugar_logs.json").read_text(encoding="utf-8")

    bridge = AssistantBridge(FakeClient(error=RuntimeError("network down")))

    danish = bridge.ask("Hvordan går det?", state.entries, Language.DANISH)
    english = bridge.ask("How am I doing?", state.entries, Language.ENGLISH)

    if danish != "Der opstod en fejl i forbindelsen til AI assistenten.":
        raise AssertionError(f"Unexpected Danish fallback: {danish!r}")
    if english != "An error occurred connecting to the AI assistant.":
        raise AssertionError(f"Unexpected English fallback: {english!r}")
    if state.entries != before:
        raise AssertionError("Expected entries to be unchanged")
    if (tmp_path / "data" / "blood_sugar_logs.json").read_text(encoding="utf-8") != stored_before:
        raise AssertionError("Expected stored entries to be unchanged")


def test_conversation_appends_user_then_assistant(tmp_path: Path) -> None:
    """Test the message sequence and loading flag around a submission."""
    state = make_state(tmp_path)
    seen_loading: list[bool] = []

    conversation: Conversation

    class ObservingClient(FakeClient):
        def complete(self, instructions: str, prompt: str) -> str:
            seen_loading.append(conversation.is_loading)
            roles = [m.role for m in conversation.messages]
            if roles != [MessageRole.USER]:
                raise AssertionError(f"Expected only the user message so far, got {roles}")
            return super().complete(instructions, prompt)

    conversation = Conversation(AssistantBridge(ObservingClient(reply="Fine.")), state)

    accepted = asyncio.run(conversation.submit("  Any trends?  "))

    if not accepted:
        raise AssertionError("Expected submission to be accepted")
    if seen_loading != [True]:
        raise AssertionError(f"Expected loading during the call, got {seen_loading}")
    if conversation.is_loading:
        raise AssertionError("Expected loading flag to be cleared")
    contents = [(m.role, m.content) for m in conversation.messages]
    if contents != [(MessageRole.USER, "Any trends?"), (MessageRole.ASSISTANT, "Fine.")]:
        raise AssertionError(f"Unexpected messages: {contents}")


def test_conversation_rejects_blank_and_concurrent(tmp_path: Path) -> None:
    """Test that blank input and submissions while loading are ignored."""
    state = make_state(tmp_path)
    client = FakeClient()
    conversation = Conversation(AssistantBridge(client), state)

    if asyncio.run(conversation.submit("   ")):
        raise AssertionError("Expected blank input to be rejected")

    conversation.is_loading = True
    if asyncio.run(conversation.submit("Hello")):
        raise AssertionError("Expected submission during loading to be rejected")

    if conversation.messages or client.calls:
        raise AssertionError("Expected no messages and no requests")


def test_conversation_failure_appends_fallback(tmp_path: Path) -> None:
    """Test that a failed request still produces an assistant message."""
    state = make_state(tmp_path)
    state.preferences.set_language(Language.ENGLISH)
    conversation = Conversation(AssistantBridge(FakeClient(error=ValueError("quota"))), state)

    asyncio.run(conversation.submit("Hello"))

    if conversation.messages[-1].content != "An error occurred connecting to the AI assistant.":
        raise AssertionError(f"Unexpected reply: {conversation.messages[-1]}")
    if conversation.is_loading:
        raise AssertionError("Expected loading flag to be cleared")


def test_client_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that a missing API key is reported as a service error."""
    monkeypatch.delenv("GLUCOSE_TEST_KEY", raising=False)
    client = AssistantClient(AssistantConfig(api_key_env="GLUCOSE_TEST_KEY"))

    with pytest.raises(AssistantServiceError):
        client.complete("instructions", "prompt")


def test_client_calls_responses_api() -> None:
    """Test request parameters and output extraction."""
    captured: dict[str, Any] = {}

    def create(**kwargs: Any) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(output_text="Drink water.")

    fake_openai = SimpleNamespace(responses=SimpleNamespace(create=create))
    config = AssistantConfig(model="test-model", temperature=0.2)
    client = AssistantClient(config, client=fake_openai)  # type: ignore[arg-type]

    if client.complete("be brief", "data") != "Drink water.":
        raise AssertionError("Expected output text to be returned")
    expected = {"model": "test-model", "instructions": "be brief", "input": "data", "temperature": 0.2}
    if captured != expected:
        raise AssertionError(f"Unexpected request: {captured}")


def test_client_wraps_openai_errors() -> None:
    """Test that SDK errors become AssistantServiceError."""

    def create(**kwargs: Any) -> SimpleNamespace:
        raise OpenAIError("invalid api key")

    fake_openai = SimpleNamespace(responses=SimpleNamespace(create=create))
    client = AssistantClient(AssistantConfig(), client=fake_openai)  # type: ignore[arg-type]

    with pytest.raises(AssistantServiceError):
        client.complete("instructions", "prompt")
