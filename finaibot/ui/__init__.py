"""Chat client for the relay: stream consumer and NiceGUI page.

Responsibilities:
    - Attachment preprocessing before each submission
    - Incremental reading of the relay stream into the transcript
    - Chat display with progressive typing and file uploads

The page holds no business logic; it renders the consumer's transcript.
"""
