from __future__ import annotations

import asyncio

import streamlit as st
from loguru import logger

from celebchat.catalog import load_catalog
from celebchat.config import configure_logging, get_settings
from celebchat.credentials import CredentialStore, KeyValueStore
from celebchat.manager import ChatManager
from celebchat.states import MessageKind, Screen
from celebchat.view import DisplayedMessage, TranscriptView


AVATARS = {
    MessageKind.USER: "🧑‍🎓",
    MessageKind.PERSONA: "⭐",
}


def get_manager() -> ChatManager:
    # One manager per browser session; Streamlit reruns this script on every event.
    if "manager" not in st.session_state:
        settings = get_settings()
        configure_logging(settings.log_level)
        credentials = CredentialStore(KeyValueStore(settings.store_path), fallback=settings.env_api_key)
        st.session_state["manager"] = ChatManager(view=TranscriptView(), credentials=credentials)
        logger.info("ui_session_start")
    return st.session_state["manager"]


def draw_message(msg: DisplayedMessage, target=st) -> None:
    if msg.kind is MessageKind.SYSTEM:
        target.caption(msg.text)
        return
    role = "user" if msg.kind is MessageKind.USER else "assistant"
    with target.chat_message(role, avatar=AVATARS[msg.kind]):
        st.markdown(msg.text)


st.set_page_config(page_title="CelebChat", page_icon="⭐", layout="centered")

manager = get_manager()
view: TranscriptView = manager.view

# Settings
sb = st.sidebar
sb.title("Settings")
with sb.form("settings_form", clear_on_submit=False):
    api_key = st.text_input(
        "Google Gemini API Key",
        value=manager.credentials.value or "",
        type="password",
    )
    if st.form_submit_button("Save"):
        manager.save_credential(api_key)
if not manager.has_credential:
    sb.warning("No API key saved yet.")

for notice in view.pop_notices():
    if notice.level == "success":
        sb.success(notice.text)
    else:
        st.warning(notice.text)

if view.screen is Screen.SELECTION:
    st.title("CelebChat")
    st.caption("Pick someone to talk to. A tutor will quietly help with your English.")

    catalog = load_catalog()
    cols = st.columns(2)
    for i, persona in enumerate(catalog):
        with cols[i % 2]:
            with st.container(border=True):
                st.subheader(persona.name)
                st.caption(persona.role)
                if st.button("Chat", key=f"card_{i}", use_container_width=True):
                    manager.start_chat(persona)
                    st.rerun()

    with st.expander("Someone else?"):
        with st.form("custom_persona_form"):
            name = st.text_input("Name")
            role = st.text_input("Who are they?", placeholder="e.g. Astronaut")
            if st.form_submit_button("Start chat"):
                if manager.start_custom_chat(name, role) is not None:
                    st.rerun()
                st.info("Enter both a name and a role.")

else:
    persona = view.persona
    head, back = st.columns([4, 1])
    head.title(persona.name if persona else "")
    if back.button("Back"):
        manager.return_to_selection()
        st.rerun()

    for msg in view.messages:
        draw_message(msg)

    if view.tutor_hint:
        hint, close = st.columns([6, 1])
        hint.info(f"Tutor hint: {view.tutor_hint}")
        if close.button("✕", key="close_hint"):
            manager.dismiss_tutor_hint()
            st.rerun()

    live = st.container()
    text = st.chat_input("Type your message in English...")
    if text:
        # Messages shown during the exchange are drawn right away, above the spinner.
        view.on_message = lambda msg: draw_message(msg, live)
        try:
            with st.spinner(f"{persona.name if persona else ''} is typing..."):
                asyncio.run(manager.send(text))
        finally:
            view.on_message = None
        st.rerun()
