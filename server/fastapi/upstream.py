"""
Outbound HTTP calls to the chat-completion and weather APIs.

Every call opens its own httpx.AsyncClient. Non-2xx answers are returned as
values (UpstreamResult), never raised.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from config import Settings

logger = logging.getLogger(__name__)


class MalformedUpstreamResponse(Exception):
    """A 2xx upstream body is missing data the pipeline needs."""


@dataclass(frozen=True)
class UpstreamResult:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise MalformedUpstreamResponse(f"Upstream body is not JSON: {e}") from e


class UpstreamClient:
    """Thin wrapper around the two third-party APIs."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    def _client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self.settings.upstream_timeout),
            **kwargs,
        )

    async def post_chat_completion(self, body: dict[str, Any]) -> UpstreamResult:
        """POST a chat-completion request with bearer auth."""
        url = f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"

        async with self._client() as client:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                json=body,
            )

        logger.debug("chat completion answered with %s", response.status_code)
        return UpstreamResult(status_code=response.status_code, text=response.text)

    async def get_weather(self, latitude: float, longitude: float) -> UpstreamResult:
        """GET current weather for a coordinate pair in metric units."""
        url = f"{self.settings.open_weather_map_base_url.rstrip('/')}/weather"

        async with self._client() as client:
            response = await client.get(
                url,
                params={
                    "lat": latitude,
                    "lon": longitude,
                    "units": "metric",
                    "lang": "en",
                    "appid": self.settings.open_weather_map_api_key,
                },
            )

        logger.debug("weather API answered with %s", response.status_code)
        return UpstreamResult(status_code=response.status_code, text=response.text)
