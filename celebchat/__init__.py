"""
Celebrity persona chat with an implicit English tutor.

Modules:
- session: Session (persona, transcript, single-flight busy flag)
- prompts: prompt composer + Gemini request envelope
- interpreter: fenced-JSON response parsing into InteractionResult
- llm: Gemini generateContent client over httpx
- manager: ChatManager exchange state machine driving a ChatView
- view: ChatView protocol + in-memory TranscriptView
- credentials: JSON key/value store for the API key
- catalog: built-in persona catalog and custom persona validation
- config: Settings loaded from env / .env
"""
