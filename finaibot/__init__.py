"""FinAIBot - streaming chat assistant for personal finance.

Combines FastAPI for HTTP streaming, Agno for hosted model access,
NiceGUI for the chat interface, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streaming responses
    - relay: Style resolution, prompt assembly and stream re-chunking
    - agent: Hosted model client and prompt templates
    - streaming: Event-stream frame codec
    - parsing: Attachment preprocessing and context formatting
    - profiles: User profile stores
    - ui: Stream consumer and chat page
    - models: Request, transcript and frame schemas
"""

__version__ = "0.1.0"
