"""Unit tests for individual components in isolation.

Coverage:
    - relay/: configuration, upstream client, translator, relay service
    - models/: Pydantic validation and role mapping
    - ui/: SSE line parsing and transcript handling
"""
