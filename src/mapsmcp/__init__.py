"""Google Maps geocoding and nearby search behind a JSON-RPC style HTTP endpoint."""

__version__ = "1.0.0"
