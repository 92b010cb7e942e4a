# Role: FastAPI dependencies. The relay is built once in create_app() and kept on app.state.

from fastapi import Request

from backend.core.relay import MessageRelay


def get_relay(request: Request) -> MessageRelay:
    return request.app.state.relay
