"""Shared fakes and sample Dialogflow results for the relay tests."""

from typing import Any, Dict, List, Optional, Tuple


def tagged_string(value: str) -> Dict[str, Any]:
    return {"kind": "stringValue", "stringValue": value}


def greeting_result() -> Dict[str, Any]:
    """The Dialogflow answer to "bonjour" as the provider client encodes it."""
    return {
        "fulfillmentText": "Salut!",
        "intent": {
            "displayName": "greeting",
            "name": "projects/x/agent/intents/1",
            "priority": 500000,
        },
        "parameters": {"fields": {"city": tagged_string("Paris")}},
        "fulfillmentMessages": [
            {"payload": {"fields": {"cardType": tagged_string("info")}}},
        ],
    }


class FakeDialogflowClient:
    """Stands in for DialogflowClient.

    - result: tagged query result returned by detect_intent
    - error: exception raised instead, when set
    - calls: (text, session_id) pairs received
    """

    def __init__(self, result: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.result = result if result is not None else greeting_result()
        self.error = error
        self.calls: List[Tuple[str, str]] = []
        self.closed = False

    async def detect_intent(self, text: str, session_id: str) -> Dict[str, Any]:
        self.calls.append((text, session_id))
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self) -> None:
        self.closed = True
