"""Static tool table: descriptors advertised on initialize and their handlers."""

from typing import Any, Awaitable, Callable, Dict, List

from ..errors import Failure
from ..models import GeocodeParams, PlacesSearchParams, ToolDescriptor, ToolResult
from ..services.maps_client import GoogleMapsClient
from . import geocode, places

ToolHandler = Callable[[Any, GoogleMapsClient], Awaitable[ToolResult | Failure]]

TOOL_DESCRIPTORS: List[ToolDescriptor] = [
    ToolDescriptor(
        name=geocode.NAME,
        description=geocode.DESCRIPTION,
        parameters=GeocodeParams.model_json_schema(),
    ),
    ToolDescriptor(
        name=places.NAME,
        description=places.DESCRIPTION,
        parameters=PlacesSearchParams.model_json_schema(),
    ),
]

TOOL_HANDLERS: Dict[str, ToolHandler] = {
    geocode.NAME: geocode.run_geocode,
    places.NAME: places.run_places_search,
}

__all__ = [
    "TOOL_DESCRIPTORS",
    "TOOL_HANDLERS",
    "ToolHandler",
]
