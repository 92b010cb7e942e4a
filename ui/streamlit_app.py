# Role: Streamlit chat UI for the relay.
# - Relay is authoritative: it returns the session id to reuse on the next turn.
# - Sidebar shows the last detected intent and its parameters.

from __future__ import annotations

import os
from typing import Any, Dict, List

import requests
import streamlit as st

RELAY_URL = os.getenv("RELAY_URL", "http://127.0.0.1:5000")


# ----------------------------
# Session helpers
# ----------------------------
def ensure_session() -> None:
    if "session_id" not in st.session_state:
        st.session_state["session_id"] = None
    if "messages" not in st.session_state:
        st.session_state["messages"] = []
    if "busy" not in st.session_state:
        st.session_state["busy"] = False
    if "last_result" not in st.session_state:
        st.session_state["last_result"] = None


# ----------------------------
# Relay calls
# ----------------------------
def send_to_relay(text: str, session_id: str | None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"text": text}
    if session_id:
        body["sessionId"] = session_id

    resp = requests.post(f"{RELAY_URL}/send-message", json=body, timeout=30)
    resp.raise_for_status()
    return resp.json()


def relay_error_message(exc: requests.HTTPError) -> str:
    # The relay answers provider failures with 500 + {"name", "message"}.
    resp = exc.response
    if resp is None:
        return str(exc)
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"The agent returned an error: {body['message']}"
    return f"The relay returned HTTP {resp.status_code}."


def payloads_of(query_result: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        m["payload"]
        for m in query_result.get("fulfillmentMessages") or []
        if isinstance(m, dict) and isinstance(m.get("payload"), dict)
    ]


# ----------------------------
# Sidebar: last intent + parameters
# ----------------------------
def render_sidebar() -> None:
    st.sidebar.title("Conversation")

    if st.sidebar.button("New chat", use_container_width=True, disabled=st.session_state["busy"]):
        st.session_state["session_id"] = None
        st.session_state["messages"] = []
        st.session_state["last_result"] = None
        st.rerun()

    st.sidebar.caption(f"Session: {st.session_state['session_id'] or 'not started'}")
    st.sidebar.divider()

    qr = st.session_state.get("last_result")
    if not qr:
        st.sidebar.info("Send a message to see the detected intent.")
        return

    intent = qr.get("intent") or {}
    st.sidebar.markdown(f"**Intent:** {intent.get('displayName') or '-'}")
    if qr.get("parameters"):
        st.sidebar.json(qr["parameters"])


# ----------------------------
# Chat
# ----------------------------
def render_message(msg: Dict[str, Any]) -> None:
    with st.chat_message(msg["role"]):
        if msg.get("content"):
            st.write(msg["content"])
        for payload in msg.get("payloads") or []:
            st.json(payload)


def render_chat() -> None:
    for msg in st.session_state["messages"]:
        render_message(msg)


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Nomadia", layout="wide")

    st.title("Nomadia")
    st.caption("Chat with the Dialogflow agent through the relay.")

    ensure_session()
    render_sidebar()
    render_chat()

    user_input = st.chat_input("Écrivez votre message…", disabled=st.session_state["busy"])
    if not user_input:
        return

    # Echo user message immediately
    user_msg = {"role": "user", "content": user_input}
    st.session_state["messages"].append(user_msg)
    render_message(user_msg)

    st.session_state["busy"] = True
    try:
        with st.spinner("Thinking..."):
            data = send_to_relay(user_input, st.session_state["session_id"])

        qr = data.get("queryResult") or {}
        st.session_state["session_id"] = data.get("sessionId")
        st.session_state["last_result"] = qr

        agent_msg = {
            "role": "assistant",
            "content": qr.get("fulfillmentText") or "",
            "payloads": payloads_of(qr),
        }
        st.session_state["messages"].append(agent_msg)
        render_message(agent_msg)

    except requests.HTTPError as e:
        msg = relay_error_message(e)
        st.session_state["messages"].append({"role": "assistant", "content": msg})
        with st.chat_message("assistant"):
            st.error(msg)

    except requests.RequestException:
        msg = f"I couldn't reach the relay. Make sure it is running on {RELAY_URL}."
        st.session_state["messages"].append({"role": "assistant", "content": msg})
        with st.chat_message("assistant"):
            st.error(msg)
    finally:
        st.session_state["busy"] = False


if __name__ == "__main__":
    main()
