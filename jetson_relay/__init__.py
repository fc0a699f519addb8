"""Jetson Chat Relay - streaming web chat for a locally hosted LLM.

Forwards the browser's message history to a local Ollama-style inference
server and relays the streamed reply back as Server-Sent Events.

Components:
    - relay: upstream client, NDJSON-to-SSE translator, relay service
    - api: HTTP endpoints and streaming responses
    - models: Request/response and wire schemas
    - ui: SSE reassembly client and chat page
"""

__version__ = "0.1.0"
