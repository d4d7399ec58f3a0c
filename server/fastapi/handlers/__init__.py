from .chat import ChatHandler
from .weather import WeatherHandler

__all__ = ["ChatHandler", "WeatherHandler"]
