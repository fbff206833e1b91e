"""Test package for FinAIBot.

Unit tests cover isolated logic; integration tests drive the FastAPI relay
and the stream consumer together.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests
    - fakes.py: Scripted model client and profile stores

The hosted model is always replaced by a fake, so no API key is needed.
Leverages pytest with pytest-check for soft assertions.
"""
