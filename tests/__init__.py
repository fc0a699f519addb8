"""Test package for Jetson Chat Relay.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests through the FastAPI app

The inference server is always replaced by a scripted httpx.MockTransport
(see fakes.py). Leverages pytest with pytest-check for soft assertions.
"""
