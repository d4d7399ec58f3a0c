import json

import httpx
import pytest

from config import Settings
from upstream import UpstreamClient

OPENAI_HOST = "api.openai.com"
WEATHER_HOST = "api.openweathermap.org"


class FakeUpstream:
    """Serves queued responses per upstream host and records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, list[httpx.Response]] = {OPENAI_HOST: [], WEATHER_HOST: []}

    def queue(self, host: str, response: httpx.Response) -> None:
        self.responses[host].append(response)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queued = self.responses.get(request.url.host)
        if not queued:
            raise AssertionError(f"Unexpected request to {request.url}")
        return queued.pop(0)

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def settings():
    return Settings(
        openai_api_key="sk-test",
        open_weather_map_api_key="owm key/+&",
        environment="test",
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def upstream_client(settings, upstream):
    return UpstreamClient(settings, transport=httpx.MockTransport(upstream))


def make_completion(content: str = "Hello!") -> httpx.Response:
    """A chat-completion body with a single text answer."""
    return httpx.Response(200, json={
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"},
        ],
    })


def make_function_completion(name: str = "get_weather_of_location", arguments: dict | None = None) -> httpx.Response:
    """A chat-completion body whose first choice is a function call."""
    if arguments is None:
        arguments = {
            "latitude": 52.52,
            "longitude": 13.405,
            "location_name": "Berlin",
            "postcode": "10117",
            "country_name": "Germany",
        }
    return httpx.Response(200, json={
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "function_call": {"name": name, "arguments": json.dumps(arguments)},
                },
                "finish_reason": "stop",
            },
        ],
    })


def make_weather(
    temp: float = 15.3,
    icon: str = "04d",
    description: str = "clouds",
    name: str = "Mitte",
    lat: float = 52.52,
    lon: float = 13.405,
) -> httpx.Response:
    """An OpenWeatherMap current-weather body."""
    return httpx.Response(200, json={
        "coord": {"lat": lat, "lon": lon},
        "weather": [{"id": 803, "main": "Clouds", "description": description, "icon": icon}],
        "main": {"temp": temp, "feels_like": 14.9, "humidity": 71},
        "timezone": 7200,
        "name": name,
        "cod": 200,
    })
