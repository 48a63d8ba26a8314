import sys
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

_root = Path(__file__).resolve().parents[1]
_src = _root / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from mapsmcp.dispatcher import RequestDispatcher  # noqa: E402
from mapsmcp.services.maps_client import GoogleMapsClient  # noqa: E402
from mapsmcp.services.session_store import InMemorySessionStore  # noqa: E402


GEOCODE_RESULT: Dict[str, Any] = {
    "formatted_address": "1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
    "geometry": {"location": {"lat": 37.4223878, "lng": -122.0841877}},
    "place_id": "ChIJj61dQgK6j4AR4GeTYWZsKWw",
}

PLACES_RESULTS: List[Dict[str, Any]] = [
    {
        "name": "Blue Bottle Coffee",
        "geometry": {"location": {"lat": 37.776, "lng": -122.423}},
        "place_id": "place-1",
        "types": ["cafe", "food"],
        "vicinity": "315 Linden St, San Francisco",
    },
    {
        "name": "Sightglass Coffee",
        "place_id": "place-2",
        "types": ["cafe"],
        "vicinity": "270 7th St, San Francisco",
    },
]


@pytest.fixture
def mock_maps() -> MagicMock:
    """Maps client double with async geocode/places_nearby."""
    m = MagicMock(spec=GoogleMapsClient)
    m.geocode = AsyncMock(return_value=[GEOCODE_RESULT])
    m.places_nearby = AsyncMock(return_value=list(PLACES_RESULTS))
    m.close = AsyncMock(return_value=None)
    return m


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def dispatcher(session_store: InMemorySessionStore, mock_maps: MagicMock) -> RequestDispatcher:
    return RequestDispatcher(sessions=session_store, maps=mock_maps)
