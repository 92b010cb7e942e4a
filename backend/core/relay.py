# Role: Handles one /send-message turn. Resolves the session id, forwards the utterance to Dialogflow
# and narrows/normalizes the result (intent summary, plain-JSON parameters and payloads).

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from backend.llm.dialogflow_client import DialogflowClient
from backend.models.query_result import IntentSummary, QueryResult
from backend.utils.struct_normalizer import struct_to_json


class MalformedResponseError(RuntimeError):
    """Raised when Dialogflow returns a query result we cannot narrow."""


@dataclass(frozen=True)
class RelayResponse:
    query_result: QueryResult
    session_id: str


def new_session_id() -> str:
    return str(uuid.uuid4())


def clean_message(message: Any) -> Any:
    # Custom payloads are flattened; text and other message kinds are returned as they are.
    if isinstance(message, Mapping) and message.get("payload") is not None:
        return {"payload": struct_to_json(message["payload"])}
    return message


def clean_query_result(result: Mapping) -> QueryResult:
    intent = result.get("intent")
    if not isinstance(intent, Mapping):
        raise MalformedResponseError("Dialogflow query result has no intent")

    return QueryResult(
        fulfillment_text=result.get("fulfillmentText") or "",
        intent=IntentSummary(
            display_name=intent.get("displayName") or "",
            name=intent.get("name") or "",
        ),
        parameters=struct_to_json(result.get("parameters")),
        fulfillment_messages=[clean_message(m) for m in result.get("fulfillmentMessages") or []],
    )


class MessageRelay:
    def __init__(self, client: DialogflowClient) -> None:
        # Key line: the provider client is passed in explicitly (tests use a fake).
        self.client = client

    async def handle_message(self, text: str, session_id: Optional[str] = None) -> RelayResponse:
        # 1) Reuse the caller's session or start a fresh one
        # 2) Single awaited Dialogflow round trip
        # 3) Build the clean, flat query result
        session = session_id or new_session_id()

        result = await self.client.detect_intent(text, session)
        query_result = clean_query_result(result)

        logger.debug("Cleaned Dialogflow response for session {}: {}", session, query_result)
        return RelayResponse(query_result=query_result, session_id=session)

    async def close(self) -> None:
        await self.client.close()
