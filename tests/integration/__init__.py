"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat with real HTTP requests through ASGITransport
    - Error responses before streaming starts
    - Chat page reassembly of the relayed stream
"""
