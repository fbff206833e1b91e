"""Integration tests for components working together as a system.

Coverage:
    - Relay endpoint over real HTTP semantics via ASGITransport
    - Stream consumer against the running app
    - Transport failures reproduced with httpx.MockTransport

Only the hosted model and profile store are faked.
"""
