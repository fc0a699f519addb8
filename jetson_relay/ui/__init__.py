"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Consuming the relay's SSE stream
    - Accumulating streamed fragments into the in-flight bot message
    - Minimal message display and input

Contains minimal business logic. Delegates all operations to the API.
"""
