"""FastAPI endpoints for the chat relay.

HTTP and streaming routes with async request handling. Supports
Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Relay a conversation and stream the reply
"""

from jetson_relay.api.app import app, create_app

__all__ = ["app", "create_app"]
