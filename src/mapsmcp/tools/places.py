import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..errors import Failure, FailureKind, MapsProviderError
from ..models import PlacesSearchParams, ToolResult
from ..services.maps_client import GoogleMapsClient, read_api_key

logger = logging.getLogger(__name__)

NAME = "places-search"
DESCRIPTION = "Search for places using Google Places API"

DEFAULT_LOCATION = {"lat": 0.0, "lng": 0.0}
DEFAULT_RADIUS_METERS = 5000


def _place_record(place: Dict[str, Any]) -> Dict[str, Any]:
    record: Dict[str, Any] = {"name": place.get("name")}
    location = (place.get("geometry") or {}).get("location")
    if location is not None:
        record["location"] = location
    record["place_id"] = place.get("place_id")
    record["types"] = place.get("types") or []
    record["vicinity"] = place.get("vicinity")
    return record


async def run_places_search(parameters: Any, maps: GoogleMapsClient) -> ToolResult | Failure:
    """Nearby search for ``query``; location defaults to 0,0 and radius to 5000 m."""
    try:
        params = PlacesSearchParams.model_validate(parameters)
    except ValidationError as e:
        return Failure.validation(NAME, e)

    location = params.location.model_dump() if params.location else DEFAULT_LOCATION
    # a radius of 0 is treated like an omitted one
    radius = params.radius or DEFAULT_RADIUS_METERS

    try:
        results = await maps.places_nearby(
            location=location,
            radius=radius,
            keyword=params.query,
            key=read_api_key(),
        )
    except MapsProviderError as e:
        return Failure(FailureKind.PROVIDER, str(e))

    places = [_place_record(place) for place in results]
    logger.debug("Places search %r returned %d results", params.query, len(places))
    return ToolResult.of(f"Found {len(places)} places", places)
