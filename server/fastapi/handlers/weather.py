"""
Weather Handler

Two hops: the chat model resolves a free-text prompt into a geo location via a
forced function call, then OpenWeatherMap is asked for the current weather at
those coordinates.
Requires environment variables: OPENAI_API_KEY, OPEN_WEATHER_MAP_API_KEY
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from envelope import normalize
from models import (
    ChatCompletion,
    FunctionCall,
    GeoQueryArguments,
    OpenWeatherMapResult,
    ResponseEnvelope,
    WeatherReport,
    WeatherRequest,
)
from upstream import MalformedUpstreamResponse, UpstreamClient

logger = logging.getLogger(__name__)

WEATHER_MODEL = "gpt-3.5-turbo-0125"
WEATHER_FUNCTION_NAME = "get_weather_of_location"
ICON_URL = "https://openweathermap.org/img/w/{icon}.png"

SYSTEM_PROMPT = (
    "You are a helpful assistant that helps the user to get weather information about a location."
)

WEATHER_FUNCTION = {
    "name": WEATHER_FUNCTION_NAME,
    "description": "Gets weather information by geo location.",
    "parameters": {
        "type": "object",
        "required": ["latitude", "longitude", "location_name", "postcode", "country_name"],
        "properties": {
            "latitude": {
                "description": "The latitude part of the geo location.",
                "type": "number",
            },
            "longitude": {
                "description": "The longitude part of the geo location.",
                "type": "number",
            },
            "location_name": {
                "description": "The official name of the location.",
                "type": "string",
            },
            "postcode": {
                "description": "The postcode of the location.",
                "type": "string",
            },
            "country_name": {
                "description": "The name of the location's country.",
                "type": "string",
            },
        },
    },
}


def build_weather_request(prompt: str) -> dict[str, Any]:
    """Build a chat-completion body that forces a get_weather_of_location call."""
    return {
        "model": WEATHER_MODEL,
        "functions": [WEATHER_FUNCTION],
        "function_call": {"type": "function", "name": WEATHER_FUNCTION_NAME},
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
    }


def parse_function_call(result_json: Any) -> FunctionCall:
    """Pull the function call out of the first choice of a completion."""
    try:
        completion = ChatCompletion.model_validate(result_json)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Invalid chat completion body: {e}") from e

    if not completion.choices:
        raise MalformedUpstreamResponse("Chat completion contained no choices")

    function_call = completion.choices[0].message.function_call
    if function_call is None:
        raise MalformedUpstreamResponse("Chat completion contained no function call")
    return function_call


def parse_geo_arguments(arguments: str) -> GeoQueryArguments:
    try:
        return GeoQueryArguments.model_validate(json.loads(arguments))
    except (json.JSONDecodeError, ValidationError) as e:
        raise MalformedUpstreamResponse(f"Invalid function arguments: {e}") from e


def build_weather_report(result_json: Any) -> WeatherReport:
    """Reshape an OpenWeatherMap body; only the first weather entry is used."""
    try:
        result = OpenWeatherMapResult.model_validate(result_json)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Invalid weather body: {e}") from e

    if not result.weather:
        raise MalformedUpstreamResponse("Weather response contained no weather entries")

    current = result.weather[0]
    return WeatherReport(
        icon=ICON_URL.format(icon=current.icon),
        latitude=result.coordinates.lat,
        longitude=result.coordinates.lon,
        name=result.name,
        temperature=result.main.temp,
        weather=current.description,
    )


class WeatherHandler:
    def __init__(self, client: UpstreamClient):
        self.client = client

    async def handle(self, request: WeatherRequest) -> ResponseEnvelope:
        logger.debug("client submitted '%s' as prompt", request.prompt)

        # Hop 1: let the model resolve the location
        model_result = await self.client.post_chat_completion(build_weather_request(request.prompt))
        if not model_result.ok:
            logger.warning("Location resolution failed with %s", model_result.status_code)
            return normalize(False, None, model_result.status_code, model_result.text)

        function_call = parse_function_call(model_result.json())
        if function_call.name != WEATHER_FUNCTION_NAME:
            # The code is the model call's own (successful) status
            logger.warning("Model asked for unsupported function %s", function_call.name)
            return normalize(
                False,
                None,
                model_result.status_code,
                f"Unsupported function: {function_call.name}",
            )

        location = parse_geo_arguments(function_call.arguments)
        logger.debug(
            "resolved %s (%s, %s)",
            location.location_name,
            location.latitude,
            location.longitude,
        )

        # Hop 2: current weather at those coordinates
        weather_result = await self.client.get_weather(location.latitude, location.longitude)
        if not weather_result.ok:
            logger.warning("Weather lookup failed with %s", weather_result.status_code)
            return normalize(False, None, weather_result.status_code, weather_result.text)

        report = build_weather_report(weather_result.json())
        return normalize(True, report, 200, "")
