# Role: Flat, client-facing view of a Dialogflow query result. Field names are snake_case in Python and
# serialize as camelCase (fulfillmentText, displayName, ...) for the web client.

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IntentSummary(CamelModel):
    display_name: str = ""
    name: str = ""


class QueryResult(CamelModel):
    fulfillment_text: str = ""
    intent: IntentSummary
    parameters: Any = None
    fulfillment_messages: List[Any] = Field(default_factory=list)
