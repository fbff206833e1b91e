"""Unit tests for individual components in isolation.

Coverage:
    - relay/: Flush rules, pacing, prompt assembly and stream start-up
    - streaming/: Frame encoding, decoding and record splitting
    - parsing/: Attachment preprocessing and context formatting
    - profiles/: In-memory and SQLite stores
    - agent/: Model configuration and event filtering

Uses mocks for Agno classes. Leverages pytest-check for multiple
assertions per test.
"""
