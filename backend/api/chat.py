# Role: Thin HTTP adapter for the send-message endpoint. Validates request/response shapes and delegates the
# whole turn to MessageRelay (Dialogflow plumbing and normalization live in core/llm/utils, not in the API layer).

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from google.api_core.exceptions import GoogleAPICallError
from loguru import logger

from backend.api.deps import get_relay
from backend.core.relay import MessageRelay
from backend.models.query_result import CamelModel, QueryResult

router = APIRouter(tags=["chat"])


class SendMessageRequest(CamelModel):
    text: str
    session_id: Optional[str] = None


class SendMessageResponse(CamelModel):
    query_result: QueryResult
    session_id: str


def error_body(exc: Exception) -> Dict[str, Any]:
    body: Dict[str, Any] = {"name": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, GoogleAPICallError):
        body["code"] = exc.code
        if exc.grpc_status_code is not None:
            body["status"] = exc.grpc_status_code.name
    return body


@router.post("/send-message", response_model=SendMessageResponse)
async def send_message(req: SendMessageRequest, relay: MessageRelay = Depends(get_relay)):
    # 1) Forward (text, sessionId) to the relay
    # 2) Return the clean query result + the session actually used
    # 3) Any failure -> 500 with the error serialized, no retry
    try:
        result = await relay.handle_message(req.text, req.session_id)
    except Exception as e:
        logger.exception("DIALOGFLOW ERROR: {}", e)
        return JSONResponse(status_code=500, content=error_body(e))

    logger.info("Cleaned Dialogflow response sent to client.")
    return SendMessageResponse(query_result=result.query_result, session_id=result.session_id)
