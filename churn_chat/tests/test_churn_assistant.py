"""测试 ChurnAssistant 包装。"""

import pytest

from churn_chat.agents.churn_assistant import ChurnAssistant, create_assistant
from churn_chat.domain.models import TurnSuccess
from churn_chat.providers import create_client
from churn_chat.providers.churn_client import ChurnApiClient
from churn_chat.rendering.blocks import PlainText


class SettingsStub:
    chat_endpoint_url = "https://example.test/chat"
    http_timeout = 1.0
    turn_timeout = 5.0
    greeting_message = "👋 Hello! Tell me about the customer."


class FakeClient:
    name = "fake"

    def __init__(self):
        self.requests = []

    async def chat(self, req):
        self.requests.append(req)
        return TurnSuccess(f"echo: {req.message}", session_id="sess-1")


def test_greeting_is_first_message():
    assistant = ChurnAssistant(settings=SettingsStub(), client=FakeClient())
    transcript = assistant.transcript
    assert len(transcript) == 1
    assert transcript[0].role == "assistant"
    assert transcript[0].content == SettingsStub.greeting_message
    assert transcript[0].rendered_blocks == (PlainText(SettingsStub.greeting_message),)


def test_greeting_can_be_disabled():
    assistant = ChurnAssistant(settings=SettingsStub(), client=FakeClient(), greeting=False)
    assert assistant.transcript == ()


def test_default_client_is_built_from_settings():
    assistant = create_assistant(settings=SettingsStub(), greeting=False)
    assert assistant.controller.snapshot() == ()
    assert isinstance(create_client(SettingsStub()), ChurnApiClient)


def test_conversations_are_independent():
    a = ChurnAssistant(settings=SettingsStub(), client=FakeClient(), greeting=False)
    b = ChurnAssistant(settings=SettingsStub(), client=FakeClient(), greeting=False)
    assert a.controller is not b.controller


@pytest.mark.asyncio
async def test_ask_runs_a_turn():
    client = FakeClient()
    assistant = ChurnAssistant(settings=SettingsStub(), client=client)
    outcome = await assistant.ask("senior citizen, fiber optic")
    assert outcome.response_text == "echo: senior citizen, fiber optic"
    assert assistant.session_id == "sess-1"
    assert not assistant.is_sending
    assert len(assistant.transcript) == 3
    assert assistant.cancel() is False
