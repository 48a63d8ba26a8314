import logging
from typing import Any

from pydantic import ValidationError

from ..errors import Failure, FailureKind, MapsProviderError
from ..models import GeocodeParams, ToolResult
from ..services.maps_client import GoogleMapsClient, read_api_key

logger = logging.getLogger(__name__)

NAME = "geocode"
DESCRIPTION = "Convert an address to coordinates"


async def run_geocode(parameters: Any, maps: GoogleMapsClient) -> ToolResult | Failure:
    """Geocode an address and return the first provider match.

    Args:
        parameters: Raw ``parameters`` object from the callTool request.
        maps: Provider client.

    Returns:
        ToolResult with a "Found location" summary and a payload holding
        location, formatted_address and place_id; or a Failure when the
        parameters are invalid, the provider call fails or nothing matched.
    """
    try:
        params = GeocodeParams.model_validate(parameters)
    except ValidationError as e:
        return Failure.validation(NAME, e)

    try:
        results = await maps.geocode(params.address, key=read_api_key())
    except MapsProviderError as e:
        return Failure(FailureKind.PROVIDER, str(e))

    if not results:
        logger.info("Geocode returned no results for %r", params.address)
        return Failure(FailureKind.PROVIDER, "No results found")

    first = results[0]
    formatted_address = first.get("formatted_address", "")
    return ToolResult.of(
        f"Found location: {formatted_address}",
        {
            "location": (first.get("geometry") or {}).get("location"),
            "formatted_address": formatted_address,
            "place_id": first.get("place_id"),
        },
    )
