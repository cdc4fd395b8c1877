import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from grounded_gemini.client import GroundedClient
from grounded_gemini.types import ModelDescriptor

KEY_MODEL = ModelDescriptor(
    id="gemini-2.5-flash",
    provider="google",
    api="google-generative-ai",
    base_url="https://generativelanguage.googleapis.com/v1beta",
)
CLI_MODEL = ModelDescriptor(
    id="gemini-2.5-flash",
    provider="google-gemini-cli",
    api="google-gemini-cli",
    base_url="https://cloudcode-pa.googleapis.com",
)
ANTIGRAVITY_MODEL = ModelDescriptor(
    id="gemini-3-flash",
    provider="google-antigravity",
    api="google-gemini-cli",
    base_url="https://daily-cloudcode-pa.sandbox.googleapis.com",
)

OAUTH_CREDENTIAL = json.dumps({"token": "tok-123", "projectId": "proj-9"})


def data_line(payload: Any) -> bytes:
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")


def text_frame(*texts: str, **candidate: Any) -> dict[str, Any]:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": t} for t in texts]}, **candidate}
        ]
    }


def sse_response(*chunks: bytes, status_code: int = 200) -> httpx.Response:
    async def _body() -> AsyncIterator[bytes]:
        for chunk in chunks:
            yield chunk

    return httpx.Response(
        status_code,
        content=_body(),
        headers={"content-type": "text/event-stream"},
    )


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, respond: Callable[[], httpx.Response]) -> None:
        self._respond = respond
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._respond()
        self.responses.append(response)
        return response

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


def make_client(
    recorder: Recorder,
    credential: str | None = "test-key",
) -> GroundedClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return GroundedClient(credentials=lambda model: credential, http_client=http_client)
