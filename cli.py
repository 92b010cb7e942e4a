# Role: Local developer CLI to talk to the Dialogflow agent through MessageRelay without the web UI.
# Useful for checking the cleaned query results and seeing debug logs in the terminal.

from __future__ import annotations

import asyncio
import json
from typing import Optional

from loguru import logger

import backend.config
backend.config.load_env()

from backend.core.relay import MessageRelay, RelayResponse
from backend.llm.dialogflow_client import DialogflowClient


def _print_result(result: RelayResponse) -> None:
    qr = result.query_result
    print(f"\nAgent: {qr.fulfillment_text}")
    print(f"  intent: {qr.intent.display_name or '-'}")
    if qr.parameters:
        print(f"  parameters: {json.dumps(qr.parameters, ensure_ascii=False)}")
    for msg in qr.fulfillment_messages:
        if isinstance(msg, dict) and "payload" in msg:
            print(f"  payload: {json.dumps(msg['payload'], ensure_ascii=False)}")


async def send_turn(relay: MessageRelay, text: str, session_id: Optional[str]) -> Optional[RelayResponse]:
    # A failed turn is reported and the session goes on; nothing is retried.
    try:
        return await relay.handle_message(text, session_id)
    except Exception as e:
        logger.exception("DIALOGFLOW ERROR: {}", e)
        print(f"\nError: {e}")
        return None


async def _chat(relay: MessageRelay) -> None:
    # Key line: one event loop for the whole session (the gRPC channel is bound to it).
    session_id: Optional[str] = None

    while True:
        try:
            user_message = (await asyncio.to_thread(input, "\nYou: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            session_id = None
            print("Next message starts a new session.")
            continue

        if cmd in {"/session", "session"}:
            print(f"session_id: {session_id or '(none yet)'}")
            continue

        result = await send_turn(relay, user_message, session_id)
        if result is None:
            continue
        session_id = result.session_id
        _print_result(result)


async def _session(relay: MessageRelay) -> None:
    try:
        await _chat(relay)
    finally:
        await relay.close()


def main() -> None:
    # 1) Create MessageRelay (fails fast on bad credentials)
    # 2) Keep the session id returned by the relay across turns
    # 3) Route user input -> relay -> print cleaned result
    print("Dialogflow Relay CLI")
    print("Commands: /new (new session), /session (show session_id), /exit")
    print("-" * 50)

    relay = MessageRelay(DialogflowClient())
    try:
        asyncio.run(_session(relay))
    except KeyboardInterrupt:
        print("\nBye!")


if __name__ == "__main__":
    main()
