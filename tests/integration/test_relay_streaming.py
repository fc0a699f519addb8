"""Integration tests for the SSE relay endpoint.

Tests real streaming behavior with httpx AsyncClient and ASGITransport.
Uses the actual FastAPI app; only the inference server is replaced by a
scripted httpx.MockTransport.
"""

import json

import httpx
from httpx import AsyncClient

from jetson_relay.models.schemas import RelayFrame
from tests.fakes import ScriptedUpstream, ndjson

HI = {"messages": [{"role": "user", "text": "hi"}]}


def frame_contents(body: str) -> list[str]:
    """Content of every data line in an SSE body."""
    return [
        RelayFrame.model_validate_json(line.removeprefix("data: ")).content
        for line in body.split("\n")
        if line.startswith("data: ")
    ]


class TestRelayEndpoint:
    """Integration tests for POST /api/chat."""

    async def test_relays_fragments_as_exact_frames(self, async_client: AsyncClient) -> None:
        """Two upstream chunks become exactly two SSE frames, then the stream closes."""
        response = await async_client.post("/api/chat", json=HI)

        assert response.status_code == 200
        assert response.content == b'data: {"content":"He"}\n\ndata: {"content":"llo"}\n\n'

    async def test_stream_returns_sse_headers(self, async_client: AsyncClient) -> None:
        async with async_client.stream("POST", "/api/chat", json=HI) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/event-stream")
            assert response.headers["cache-control"] == "no-cache"
            assert response.headers["connection"] == "keep-alive"

    async def test_frames_arrive_line_by_line(self, async_client: AsyncClient) -> None:
        """Each fragment is one data line with a JSON object holding its content."""
        lines: list[str] = []

        async with async_client.stream("POST", "/api/chat", json=HI) as response:
            async for line in response.aiter_lines():
                if line.startswith("data: "):
                    lines.append(line)

        assert [json.loads(line[6:]) for line in lines] == [
            {"content": "He"},
            {"content": "llo"},
        ]

    async def test_forwards_history_to_upstream(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        """Roles are mapped, text becomes content and order is preserved."""
        await async_client.post(
            "/api/chat",
            json={
                "messages": [
                    {"role": "user", "text": "hi"},
                    {"role": "bot", "text": "Hello"},
                    {"role": "user", "text": "tell me a joke"},
                ]
            },
        )

        assert upstream.sent_json() == {
            "model": "jakerains/jetsonv2",
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "Hello"},
                {"role": "user", "content": "tell me a joke"},
            ],
            "stream": True,
        }

    async def test_malformed_upstream_line_is_skipped(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        upstream.chunks = [b"not-json\n", *ndjson("ok")]

        response = await async_client.post("/api/chat", json=HI)

        assert response.status_code == 200
        assert frame_contents(response.text) == ["ok"]

    async def test_content_survives_arbitrary_read_boundaries(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        """Concatenated frames equal the upstream text even when reads split lines."""
        body = b"".join(ndjson("Über ", "schnelle ", "Füchse ✓"))
        upstream.chunks = [body[i : i + 5] for i in range(0, len(body), 5)]

        response = await async_client.post("/api/chat", json=HI)

        assert "".join(frame_contents(response.text)) == "Über schnelle Füchse ✓"

    async def test_upstream_body_is_released(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        await async_client.post("/api/chat", json=HI)

        assert upstream.bodies[0].closed

    async def test_empty_history_is_relayed(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        response = await async_client.post("/api/chat", json={"messages": []})

        assert response.status_code == 200
        assert upstream.sent_json()["messages"] == []


class TestRelayErrorHandling:
    """Tests for failures before streaming starts."""

    async def test_upstream_503_returns_500_without_frames(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        upstream.status_code = 503

        response = await async_client.post("/api/chat", json=HI)

        assert response.status_code == 500
        assert "data:" not in response.text
        assert "503" in response.json()["error"]

    async def test_unreachable_upstream_returns_500(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        upstream.connect_error = httpx.ConnectError("Connection refused")

        response = await async_client.post("/api/chat", json=HI)

        assert response.status_code == 500
        assert "error" in response.json()

    async def test_missing_messages_returns_500(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        response = await async_client.post("/api/chat", json={})

        assert response.status_code == 500
        assert "messages" in response.json()["error"]
        assert upstream.requests == []

    async def test_invalid_json_returns_500(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert "error" in response.json()

    async def test_unknown_role_returns_500(
        self, async_client: AsyncClient, upstream: ScriptedUpstream
    ) -> None:
        response = await async_client.post(
            "/api/chat", json={"messages": [{"role": "system", "text": "hi"}]}
        )

        assert response.status_code == 500
        assert "role" in response.json()["error"]
        assert upstream.requests == []

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/chat")

        assert response.status_code == 405

    async def test_cors_headers_present(self, async_client: AsyncClient) -> None:
        async with async_client.stream(
            "POST",
            "/api/chat",
            json=HI,
            headers={"Origin": "http://localhost:3000"},
        ) as response:
            assert "access-control-allow-origin" in response.headers


class TestHealth:
    """Tests for GET /health."""

    async def test_health_check(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "jetson-relay"}
