"""Mock provider for development and tests.

Returns canned chat completions without network access. Enable with
``MOCK_PROVIDER=true``.
"""

import time
import uuid
from collections import deque
from typing import Any, Dict, Iterable, Optional

import httpx

from briefgate.app.providers.base import BaseProvider
from briefgate.app.services.brief_parser import DEFAULT_SECTION_CONFIG


def build_sample_brief() -> str:
    """A well-formed brief containing every canonical heading.

    Body lines must not contain any title, or the parser would read them
    as headings.
    """
    parts = []
    for number, config in enumerate(DEFAULT_SECTION_CONFIG, start=1):
        parts.append(f"{config.title}\n• Mock point {number}.\n")
    return "\n".join(parts)


class MockProvider(BaseProvider):
    """Mock provider that answers from a script or with canned content.

    Scripted replies are consumed in order; once exhausted, brief requests
    get ``build_sample_brief()`` and other requests a short answer.
    """

    def __init__(
        self,
        replies: Optional[Iterable[Optional[str]]] = None,
        fail: bool = False,
    ):
        super().__init__("http://mock.provider", "mock-key")
        self._replies = deque(replies or ())
        self.fail = fail
        self.calls: list[Dict[str, Any]] = []

    def _generate_content(self, payload: Dict[str, Any]) -> Optional[str]:
        if self._replies:
            return self._replies.popleft()
        system = next(
            (m.get("content", "") for m in payload.get("messages", []) if m.get("role") == "system"),
            "",
        )
        if "OUTPUT FORMAT" in system:
            return build_sample_brief()
        return "This is a mock answer based on the source material."

    async def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(payload)
        if self.fail:
            raise httpx.ConnectError("Simulated provider failure")

        return {
            "id": f"chatcmpl-{uuid.uuid4().hex[:24]}",
            "object": "chat.completion",
            "created": int(time.time()),
            "model": payload.get("model", "mock-model"),
            "choices": [{
                "index": 0,
                "message": {"role": "assistant", "content": self._generate_content(payload)},
                "finish_reason": "stop",
            }],
        }

    async def health_check(self, timeout: float = 2.0) -> bool:
        return not self.fail
