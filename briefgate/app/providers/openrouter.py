"""OpenRouter provider (OpenAI-compatible chat completions API)."""

from typing import Any, Dict, Optional

import httpx

from briefgate.app.providers.base import BaseProvider


class OpenRouterProvider(BaseProvider):
    """OpenRouter chat completions with attribution headers.

    OpenRouter uses ``HTTP-Referer`` and ``X-Title`` to attribute traffic
    to the calling application.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        referer: Optional[str] = None,
        title: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        super().__init__(base_url, api_key, http_client, timeout)
        if referer:
            self.headers["HTTP-Referer"] = referer
        if title:
            self.headers["X-Title"] = title

    async def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self._get_endpoint_url("/chat/completions")
        async with self._client_context() as client:
            resp = await client.post(url, headers=self.headers, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()

    async def health_check(self, timeout: float = 2.0) -> bool:
        """Calls the /models endpoint with a short timeout."""
        try:
            url = self._get_endpoint_url("/models")
            async with self._client_context() as client:
                resp = await client.get(url, headers=self.headers, timeout=timeout)
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
