from unittest.mock import MagicMock

import pytest

from mapsmcp.errors import Failure, FailureKind, MapsProviderError
from mapsmcp.models import ToolResult
from mapsmcp.tools import TOOL_DESCRIPTORS
from mapsmcp.tools.geocode import run_geocode
from mapsmcp.tools.places import run_places_search


def test_descriptors_are_static() -> None:
    assert [(t.name, t.description) for t in TOOL_DESCRIPTORS] == [
        ("geocode", "Convert an address to coordinates"),
        ("places-search", "Search for places using Google Places API"),
    ]
    places_schema = TOOL_DESCRIPTORS[1].parameters
    assert places_schema["required"] == ["query"]
    assert set(places_schema["properties"]) == {"query", "location", "radius"}


@pytest.mark.asyncio
async def test_geocode_reads_key_at_call_time(
    mock_maps: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "first-key")
    await run_geocode({"address": "Berlin"}, mock_maps)
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "second-key")
    await run_geocode({"address": "Berlin"}, mock_maps)
    keys = [c.kwargs["key"] for c in mock_maps.geocode.call_args_list]
    assert keys == ["first-key", "second-key"]


@pytest.mark.asyncio
async def test_geocode_payload(mock_maps: MagicMock) -> None:
    result = await run_geocode({"address": "1600 Amphitheatre Parkway"}, mock_maps)
    assert isinstance(result, ToolResult)
    text, payload = result.content
    assert text == {
        "type": "text",
        "text": "Found location: 1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
    }
    assert payload["type"] == "json"
    assert payload["data"] == {
        "location": {"lat": 37.4223878, "lng": -122.0841877},
        "formatted_address": "1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
        "place_id": "ChIJj61dQgK6j4AR4GeTYWZsKWw",
    }


@pytest.mark.asyncio
async def test_geocode_takes_first_result(mock_maps: MagicMock) -> None:
    mock_maps.geocode.return_value = [
        {"formatted_address": "First", "geometry": {"location": {"lat": 1.0, "lng": 2.0}}, "place_id": "a"},
        {"formatted_address": "Second", "geometry": {"location": {"lat": 3.0, "lng": 4.0}}, "place_id": "b"},
    ]
    result = await run_geocode({"address": "Springfield"}, mock_maps)
    assert isinstance(result, ToolResult)
    assert result.content[1]["data"]["place_id"] == "a"


@pytest.mark.asyncio
@pytest.mark.parametrize("parameters", [None, {}, {"address": ""}, {"address": 12}])
async def test_geocode_rejects_bad_parameters(mock_maps: MagicMock, parameters) -> None:
    result = await run_geocode(parameters, mock_maps)
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.VALIDATION
    assert result.message.startswith("Invalid parameters for geocode")
    mock_maps.geocode.assert_not_awaited()


@pytest.mark.asyncio
async def test_geocode_provider_error(mock_maps: MagicMock) -> None:
    mock_maps.geocode.side_effect = MapsProviderError("The provided API key is invalid.")
    result = await run_geocode({"address": "Paris"}, mock_maps)
    assert result == Failure(FailureKind.PROVIDER, "The provided API key is invalid.")


@pytest.mark.asyncio
async def test_places_uses_supplied_location_and_radius(mock_maps: MagicMock) -> None:
    await run_places_search(
        {"query": "pizza", "location": {"lat": 40.7, "lng": -74}, "radius": 1500},
        mock_maps,
    )
    kwargs = mock_maps.places_nearby.call_args.kwargs
    assert kwargs["location"] == {"lat": 40.7, "lng": -74.0}
    assert kwargs["radius"] == 1500
    assert kwargs["keyword"] == "pizza"


@pytest.mark.asyncio
async def test_places_zero_radius_falls_back_to_default(mock_maps: MagicMock) -> None:
    await run_places_search({"query": "pizza", "radius": 0}, mock_maps)
    assert mock_maps.places_nearby.call_args.kwargs["radius"] == 5000


@pytest.mark.asyncio
async def test_places_records(mock_maps: MagicMock) -> None:
    result = await run_places_search({"query": "coffee"}, mock_maps)
    assert isinstance(result, ToolResult)
    assert result.content[0]["text"] == "Found 2 places"
    first, second = result.content[1]["data"]
    assert first == {
        "name": "Blue Bottle Coffee",
        "location": {"lat": 37.776, "lng": -122.423},
        "place_id": "place-1",
        "types": ["cafe", "food"],
        "vicinity": "315 Linden St, San Francisco",
    }
    assert "location" not in second
    assert second["name"] == "Sightglass Coffee"


@pytest.mark.asyncio
async def test_places_empty_results_are_not_an_error(mock_maps: MagicMock) -> None:
    mock_maps.places_nearby.return_value = []
    result = await run_places_search({"query": "unicorns"}, mock_maps)
    assert isinstance(result, ToolResult)
    assert result.content[0]["text"] == "Found 0 places"
    assert result.content[1]["data"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "parameters",
    [
        {},
        {"query": 5},
        {"query": "tea", "location": {"lat": "north", "lng": 1}},
        {"query": "tea", "location": {"lat": 1}},
        {"query": "tea", "radius": "far"},
        {"query": "tea", "radius": float("nan")},
        {"query": "tea", "radius": float("inf")},
        {"query": "tea", "location": {"lat": float("nan"), "lng": 1.0}},
        {"query": "tea", "location": {"lat": 1.0, "lng": float("-inf")}},
    ],
)
async def test_places_rejects_bad_parameters(mock_maps: MagicMock, parameters) -> None:
    result = await run_places_search(parameters, mock_maps)
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.VALIDATION
    mock_maps.places_nearby.assert_not_awaited()
