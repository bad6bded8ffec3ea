"""
Tests for the AI advisor, using a stand-in for the Gemini client.
"""

import asyncio
import json
from types import SimpleNamespace

import pytest

from deepmetric.schemas.advisor import ChatRole
from deepmetric.services.advisor import (
    ADVISOR_ERROR_MESSAGE,
    AdvisorService,
    AdvisorUnavailable,
    RequestTracker,
    build_system_instruction,
    parse_tags
)
from deepmetric.services.catalog import DEFAULT_COURSES


class FakeChat:
    def __init__(self, client, history):
        self.client = client
        self.history = history

    async def send_message(self, message):
        self.client.sent.append((message, len(self.history)))
        gate = self.client.gates.get(message)
        if gate is not None:
            await gate.wait()
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(text=f"reply to {message}")


class FakeGeminiClient:
    """Mimics the parts of ``genai.Client().aio`` the advisor calls."""

    def __init__(self, tags_text='["Python", "SQL", "Dashboards"]'):
        self.sent = []
        self.gates = {}
        self.error = None
        self.tags_text = tags_text
        self.tag_gates = {}
        self.prompts = []
        self.aio = SimpleNamespace(
            chats=SimpleNamespace(create=self.create_chat),
            models=SimpleNamespace(generate_content=self.generate_content)
        )

    def create_chat(self, model, config, history):
        self.system_instruction = config.system_instruction
        return FakeChat(self, history)

    async def generate_content(self, model, contents, config):
        self.prompts.append(contents)
        gate = self.tag_gates.get(len(self.prompts))
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.tags_text)


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def advisor(fake_client):
    return AdvisorService(client=fake_client)


def test_reply_extends_history(advisor, fake_client):
    reply = asyncio.run(advisor.ask("u1", "Which course for SQL?", DEFAULT_COURSES))

    assert reply.reply == "reply to Which course for SQL?"
    assert reply.error is None
    history = advisor.history("u1")
    assert [m.role for m in history] == [ChatRole.USER, ChatRole.MODEL]

    asyncio.run(advisor.ask("u1", "And after that?", DEFAULT_COURSES))
    # The second call is sent with the first exchange as context
    assert fake_client.sent[-1] == ("And after that?", 2)
    assert len(advisor.history("u1")) == 4


def test_system_instruction_uses_current_catalog(advisor, fake_client):
    asyncio.run(advisor.ask("u1", "Hi", DEFAULT_COURSES[:1]))

    assert DEFAULT_COURSES[0].title in fake_client.system_instruction
    assert DEFAULT_COURSES[1].title not in fake_client.system_instruction


def test_failure_returns_error_and_keeps_history(advisor, fake_client):
    fake_client.error = RuntimeError("network down")

    reply = asyncio.run(advisor.ask("u1", "Hi", DEFAULT_COURSES))

    assert reply.error == ADVISOR_ERROR_MESSAGE
    assert reply.reply is None
    assert advisor.history("u1") == []


def test_superseded_reply_is_discarded(advisor, fake_client):
    async def scenario():
        fake_client.gates["first"] = asyncio.Event()
        first = asyncio.create_task(advisor.ask("u1", "first", DEFAULT_COURSES))
        await asyncio.sleep(0)
        second = await advisor.ask("u1", "second", DEFAULT_COURSES)
        fake_client.gates["first"].set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first.superseded
    assert first.reply is None
    assert second.reply == "reply to second"
    assert [m.text for m in advisor.history("u1")] == ["second", "reply to second"]


def test_conversations_are_isolated(advisor):
    asyncio.run(advisor.ask("u1", "Hi", DEFAULT_COURSES))

    assert advisor.history("u2") == []
    advisor.reset("u1")
    assert advisor.history("u1") == []


def test_tags_skip_existing_ones(advisor):
    tags = asyncio.run(advisor.suggest_tags(
        "new", "SQL Basics", "<p>Queries</p>", existing_tags=["python"]
    ))
    assert tags == ["SQL", "Dashboards"]


def test_tags_need_title_or_description(advisor, fake_client):
    assert asyncio.run(advisor.suggest_tags("new", "  ", "<p> </p>")) == []
    assert fake_client.prompts == []


def test_tag_prompt_uses_plain_text(advisor, fake_client):
    asyncio.run(advisor.suggest_tags("new", "SQL Basics", "<p>Joins <b>and</b> views</p>"))
    assert "Description: Joins and views" in fake_client.prompts[0]


def test_tag_failures_give_no_suggestions(fake_client):
    fake_client.tags_text = "not json"
    advisor = AdvisorService(client=fake_client)
    assert asyncio.run(advisor.suggest_tags("new", "SQL", "")) == []

    fake_client.error = RuntimeError("quota")
    assert asyncio.run(advisor.suggest_tags("new", "SQL", "")) == []


def test_superseded_tag_suggestions_are_discarded(advisor, fake_client):
    async def scenario():
        fake_client.tag_gates[1] = asyncio.Event()
        first = asyncio.create_task(advisor.suggest_tags("course-1", "SQL", ""))
        await asyncio.sleep(0)
        second = await advisor.suggest_tags("course-1", "SQL", "")
        fake_client.tag_gates[1].set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first == []
    assert second == ["Python", "SQL", "Dashboards"]


def test_missing_api_key():
    advisor = AdvisorService()
    with pytest.raises(AdvisorUnavailable):
        advisor.client

    reply = asyncio.run(advisor.ask("u1", "Hi", DEFAULT_COURSES))
    assert reply.error == ADVISOR_ERROR_MESSAGE


def test_request_tracker():
    tracker = RequestTracker()
    first = tracker.begin("a")
    other = tracker.begin("b")
    second = tracker.begin("a")

    assert not tracker.is_current("a", first)
    assert tracker.is_current("a", second)
    assert tracker.is_current("b", other)


def test_parse_tags():
    assert parse_tags(json.dumps([" Python ", "", 3, "SQL"])) == ["Python", "SQL"]
    assert parse_tags("") == []
    with pytest.raises(ValueError):
        parse_tags('{"tags": []}')


def test_system_instruction_strips_html():
    instruction = build_system_instruction(DEFAULT_COURSES)
    assert "<p>" not in instruction
    assert "GHC" in instruction
