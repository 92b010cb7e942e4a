# Role: Minimal wrapper around the Dialogflow ES Sessions API. Centralizes project id, language code and
# credentials, and hands back the query result in the tagged-dict shape the struct normalizer consumes,
# so the rest of the code calls a single method: detect_intent(text, session_id).

from __future__ import annotations

from typing import Any, Dict, Optional

from google.cloud import dialogflow
from google.oauth2 import service_account
from google.protobuf import json_format, struct_pb2
from loguru import logger

import backend.config as config

TOKEN_URI = "https://oauth2.googleapis.com/token"

# protobuf oneof name -> JSON tag used by the tagged-dict shape
_KIND_TAGS = {
    "null_value": "nullValue",
    "number_value": "numberValue",
    "string_value": "stringValue",
    "bool_value": "boolValue",
    "struct_value": "structValue",
    "list_value": "listValue",
}


def struct_to_tagged(struct: struct_pb2.Struct) -> Dict[str, Any]:
    return {"fields": {key: value_to_tagged(value) for key, value in struct.fields.items()}}


def value_to_tagged(value: struct_pb2.Value) -> Dict[str, Any]:
    kind = value.WhichOneof("kind")
    if kind is None:
        return {}

    tag = _KIND_TAGS[kind]
    if kind == "struct_value":
        payload: Any = struct_to_tagged(value.struct_value)
    elif kind == "list_value":
        payload = {"values": [value_to_tagged(item) for item in value.list_value.values]}
    elif kind == "null_value":
        payload = "NULL_VALUE"
    elif kind == "number_value" and value.number_value.is_integer():
        # Struct numbers are doubles; whole numbers go out as ints.
        payload = int(value.number_value)
    else:
        payload = getattr(value, kind)

    return {"kind": tag, tag: payload}


def query_result_to_dict(query_result: dialogflow.QueryResult) -> Dict[str, Any]:
    # Key line: Struct fields stay tagged; every other message kind goes through the stock JSON mapping.
    pb = dialogflow.QueryResult.pb(query_result)

    messages = []
    for message in pb.fulfillment_messages:
        data = json_format.MessageToDict(message)
        if message.WhichOneof("message") == "payload":
            data["payload"] = struct_to_tagged(message.payload)
        messages.append(data)

    return {
        "fulfillmentText": pb.fulfillment_text,
        "intent": (
            {"displayName": pb.intent.display_name, "name": pb.intent.name}
            if pb.HasField("intent")
            else None
        ),
        "parameters": struct_to_tagged(pb.parameters),
        "fulfillmentMessages": messages,
    }


class DialogflowClient:
    def __init__(
        self,
        credentials_info: Optional[Dict[str, Any]] = None,
        project_id: Optional[str] = None,
        language_code: Optional[str] = None,
        sessions_client: Optional[dialogflow.SessionsAsyncClient] = None,
    ) -> None:
        # Key lines:
        # - Credentials come from env (no secrets in code) and are validated here, at startup.
        # - The sessions client can be injected for tests; otherwise it is built on first use.
        self.project_id = project_id or config.PROJECT_ID
        self.language_code = language_code or config.LANGUAGE_CODE
        self._sessions = sessions_client
        self._owns_sessions = False
        self._credentials = None

        if sessions_client is None:
            info = credentials_info if credentials_info is not None else config.load_credentials()
            self._credentials = self._build_credentials(info)

    @staticmethod
    def _build_credentials(info: Dict[str, Any]) -> service_account.Credentials:
        try:
            return service_account.Credentials.from_service_account_info(
                {
                    "private_key": info["private_key"],
                    "client_email": info["client_email"],
                    "token_uri": info.get("token_uri") or TOKEN_URI,
                }
            )
        except (KeyError, ValueError) as e:
            raise config.ConfigurationError(f"Invalid Dialogflow credentials: {e}") from e

    def _get_sessions(self) -> dialogflow.SessionsAsyncClient:
        # Lazy-init so the gRPC channel binds to the running event loop.
        if self._sessions is None:
            self._sessions = dialogflow.SessionsAsyncClient(credentials=self._credentials)
            self._owns_sessions = True
        return self._sessions

    def session_path(self, session_id: str) -> str:
        return dialogflow.SessionsClient.session_path(self.project_id, session_id)

    async def detect_intent(self, text: str, session_id: str) -> Dict[str, Any]:
        # 1) Address the query to the fixed project/agent session
        # 2) Await the single detect_intent round trip
        # 3) Encode the query result for the normalizer
        request = {
            "session": self.session_path(session_id),
            "query_input": {"text": {"text": text, "language_code": self.language_code}},
        }
        logger.debug("Dialogflow request: {}", request)

        response = await self._get_sessions().detect_intent(request=request)
        return query_result_to_dict(response.query_result)

    async def close(self) -> None:
        # Only the client built here is closed; an injected one belongs to the caller.
        if self._owns_sessions and self._sessions is not None:
            await self._sessions.transport.close()
            self._sessions = None
            self._owns_sessions = False
