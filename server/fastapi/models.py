from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal


# --- Inbound requests ---


class ChatRequest(BaseModel):
    prompt: str
    image: str | None = None  # Optional image URL for the vision model


class WeatherRequest(BaseModel):
    prompt: str


# --- Response envelope ---


class EnvelopeMessage(BaseModel):
    code: int
    type: Literal["error"] = "error"
    message: str


class ResponseEnvelope(BaseModel):
    success: bool
    data: dict[str, Any] | None = None
    messages: list[EnvelopeMessage] = Field(default_factory=list)


class ChatAnswer(BaseModel):
    answer: str | None


class WeatherReport(BaseModel):
    icon: str
    latitude: float
    longitude: float
    name: str
    temperature: float
    weather: str


# --- Function-call arguments produced by the model ---


class GeoQueryArguments(BaseModel):
    """Structured location the model resolves from a weather prompt."""

    latitude: float
    longitude: float
    location_name: str | None = None
    postcode: str | None = None  # Often null for places without one
    country_name: str | None = None


# --- Upstream response views ---
# Only the fields the handlers read; everything else is ignored.


class FunctionCall(BaseModel):
    name: str
    arguments: str  # JSON-encoded object


class CompletionMessage(BaseModel):
    role: str | None = None
    content: str | None = None
    function_call: FunctionCall | None = None


class CompletionChoice(BaseModel):
    message: CompletionMessage


class ChatCompletion(BaseModel):
    choices: list[CompletionChoice] = Field(default_factory=list)


class OpenWeatherMapCoordinates(BaseModel):
    lat: float
    lon: float


class OpenWeatherMapMain(BaseModel):
    temp: float


class OpenWeatherMapWeatherItem(BaseModel):
    description: str
    icon: str


class OpenWeatherMapResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coordinates: OpenWeatherMapCoordinates = Field(alias="coord")
    main: OpenWeatherMapMain
    name: str = ""
    timezone_offset: int = Field(0, alias="timezone")
    weather: list[OpenWeatherMapWeatherItem] = Field(default_factory=list)
