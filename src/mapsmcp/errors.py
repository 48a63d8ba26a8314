"""Failure values returned by handlers instead of raised exceptions.

Every failure kind maps onto the same wire shape: JSON-RPC code -32603 with
the failure message. The kind is kept for logging and tests.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import ValidationError

INTERNAL_ERROR_CODE = -32603
GENERIC_ERROR_MESSAGE = "Internal server error"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    UNKNOWN_TOOL = "unknown_tool"
    UNKNOWN_METHOD = "unknown_method"
    PROVIDER = "provider"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str = GENERIC_ERROR_MESSAGE

    @classmethod
    def validation(cls, tool: str, error: ValidationError) -> "Failure":
        """Summarize a pydantic ValidationError as one readable line."""
        problems = []
        for item in error.errors():
            loc = ".".join(str(part) for part in item.get("loc", ())) or "parameters"
            problems.append(f"{loc}: {item.get('msg', 'invalid value')}")
        return cls(FailureKind.VALIDATION, f"Invalid parameters for {tool}: " + "; ".join(problems))

    def to_error(self) -> dict:
        return {"code": INTERNAL_ERROR_CODE, "message": self.message or GENERIC_ERROR_MESSAGE}


class MapsProviderError(Exception):
    """Raised by the maps client when the provider call fails."""
