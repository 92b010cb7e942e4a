"""Tests for MessageRelay and the query-result cleaning helpers."""

import pytest

from backend.core.relay import (
    MalformedResponseError,
    MessageRelay,
    clean_message,
    clean_query_result,
)
from tests.fixtures import FakeDialogflowClient, greeting_result, tagged_string


class TestHandleMessage:
    """Tests for MessageRelay.handle_message()."""

    @pytest.mark.asyncio
    async def test_forwards_text_and_session(self, relay, fake_client) -> None:
        """Should call the provider once with the caller's session."""
        await relay.handle_message("bonjour", "s1")

        assert fake_client.calls == [("bonjour", "s1")]

    @pytest.mark.asyncio
    async def test_keeps_caller_session(self, relay) -> None:
        result = await relay.handle_message("bonjour", "abc")

        assert result.session_id == "abc"

    @pytest.mark.asyncio
    async def test_generates_fresh_session(self, relay, fake_client) -> None:
        """No session id -> a new non-empty id per request, also sent to the provider."""
        first = await relay.handle_message("bonjour")
        second = await relay.handle_message("bonjour")

        assert first.session_id
        assert second.session_id
        assert first.session_id != second.session_id
        assert [sid for _, sid in fake_client.calls] == [first.session_id, second.session_id]

    @pytest.mark.asyncio
    async def test_empty_session_treated_as_missing(self, relay) -> None:
        result = await relay.handle_message("bonjour", "")

        assert result.session_id

    @pytest.mark.asyncio
    async def test_builds_clean_query_result(self, relay) -> None:
        result = await relay.handle_message("bonjour", "s1")

        assert result.query_result.model_dump(by_alias=True) == {
            "fulfillmentText": "Salut!",
            "intent": {"displayName": "greeting", "name": "projects/x/agent/intents/1"},
            "parameters": {"city": "Paris"},
            "fulfillmentMessages": [{"payload": {"cardType": "info"}}],
        }

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        relay = MessageRelay(FakeDialogflowClient(error=RuntimeError("quota exceeded")))

        with pytest.raises(RuntimeError, match="quota exceeded"):
            await relay.handle_message("bonjour", "s1")


class TestCleanQueryResult:
    """Tests for clean_query_result()."""

    def test_intent_is_narrowed(self) -> None:
        """Only displayName and name survive."""
        qr = clean_query_result(greeting_result())

        assert qr.intent.model_dump(by_alias=True) == {
            "displayName": "greeting",
            "name": "projects/x/agent/intents/1",
        }

    def test_missing_intent_raises(self) -> None:
        result = greeting_result()
        del result["intent"]

        with pytest.raises(MalformedResponseError):
            clean_query_result(result)

    def test_missing_optional_parts(self) -> None:
        qr = clean_query_result({"intent": {"displayName": "fallback", "name": "n"}})

        assert qr.fulfillment_text == ""
        assert qr.parameters is None
        assert qr.fulfillment_messages == []

    def test_text_messages_pass_through(self) -> None:
        text_msg = {"text": {"text": ["Bonjour !"]}, "platform": "PLATFORM_UNSPECIFIED"}
        result = greeting_result()
        result["fulfillmentMessages"].insert(0, text_msg)

        qr = clean_query_result(result)

        assert qr.fulfillment_messages == [text_msg, {"payload": {"cardType": "info"}}]


class TestCleanMessage:
    """Tests for clean_message()."""

    def test_payload_is_normalized_and_other_keys_dropped(self) -> None:
        msg = {"payload": {"fields": {"title": tagged_string("Louvre")}}, "platform": "PLATFORM_UNSPECIFIED"}

        assert clean_message(msg) == {"payload": {"title": "Louvre"}}

    def test_null_payload_passes_through(self) -> None:
        msg = {"text": {"text": ["ok"]}, "payload": None}

        assert clean_message(msg) is msg
