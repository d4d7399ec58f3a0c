import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings, load_env_file
from envelope import failure
from handlers import ChatHandler, WeatherHandler
from models import ChatRequest, ResponseEnvelope, WeatherRequest
from upstream import MalformedUpstreamResponse, UpstreamClient

load_env_file()

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("Starting Chat API (%s)", settings.environment)
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set")
    if not settings.open_weather_map_api_key:
        logger.warning("OPEN_WEATHER_MAP_API_KEY is not set")
    yield
    logger.info("Shutting down Chat API")


# API docs are only exposed while developing
app = FastAPI(
    title="Chat API",
    description="Chat and weather backend on top of OpenAI and OpenWeatherMap",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Dependencies ---


def get_upstream_client(settings: Settings = Depends(get_settings)) -> UpstreamClient:
    return UpstreamClient(settings)


def get_chat_handler(client: UpstreamClient = Depends(get_upstream_client)) -> ChatHandler:
    return ChatHandler(client)


def get_weather_handler(client: UpstreamClient = Depends(get_upstream_client)) -> WeatherHandler:
    return WeatherHandler(client)


def envelope_response(envelope: ResponseEnvelope) -> JSONResponse:
    """Successful envelopes go out as 200, every failure as 500."""
    return JSONResponse(
        status_code=200 if envelope.success else 500,
        content=envelope.model_dump(),
    )


# --- Error handlers ---


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    logger.warning("Validation error: %s", exc)

    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first_error = errors[0]
        if first_error.get("type") == "missing":
            message = f"Missing required field: {first_error.get('loc', [])[-1]}"
        else:
            message = first_error.get("msg", message)

    return JSONResponse(status_code=400, content=failure(400, message).model_dump())


@app.exception_handler(MalformedUpstreamResponse)
async def malformed_upstream_handler(request: Request, exc: MalformedUpstreamResponse):
    logger.error("Malformed upstream response for %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content=failure(502, str(exc)).model_dump())


@app.exception_handler(httpx.HTTPError)
async def upstream_transport_handler(request: Request, exc: httpx.HTTPError):
    logger.error("Upstream request failed for %s: %r", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=failure(502, f"Upstream request failed: {type(exc).__name__}").model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception for %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content=failure(500, "An unexpected error occurred").model_dump(),
    )


# --- Endpoints ---


@app.get("/")
async def root():
    return {"message": "Hello from Chat API"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post(
    "/api/v1/chats",
    response_model=ResponseEnvelope,
    responses={500: {"model": ResponseEnvelope, "description": "Upstream failure"}},
)
async def chat(request: ChatRequest, handler: ChatHandler = Depends(get_chat_handler)):
    """Ask the vision model a question, optionally about an image URL."""
    return envelope_response(await handler.handle(request))


@app.post(
    "/api/v1/weathers",
    response_model=ResponseEnvelope,
    responses={500: {"model": ResponseEnvelope, "description": "Upstream failure"}},
)
async def weather(request: WeatherRequest, handler: WeatherHandler = Depends(get_weather_handler)):
    """Resolve a location from free text and return its current weather."""
    return envelope_response(await handler.handle(request))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
