from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


@dataclass
class SessionState:
    """Per-session handshake state."""

    session_id: str
    initialized: bool = False


class LatLng(BaseModel):
    lat: float = Field(strict=True, allow_inf_nan=False, description="Latitude")
    lng: float = Field(strict=True, allow_inf_nan=False, description="Longitude")


class GeocodeParams(BaseModel):
    address: str = Field(strict=True, min_length=1, description="The address to geocode")


class PlacesSearchParams(BaseModel):
    query: str = Field(strict=True, description="The search query")
    location: Optional[LatLng] = Field(
        default=None, description="Optional location to bias the search"
    )
    radius: Optional[float] = Field(
        default=None, strict=True, allow_inf_nan=False, description="Optional radius in meters"
    )


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    parameters: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass
class ToolResult:
    """Content list returned by a tool: a text summary followed by structured data."""

    content: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def of(cls, text: str, data: Any) -> "ToolResult":
        return cls(
            content=[
                {"type": "text", "text": text},
                {"type": "json", "data": data},
            ]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content}


@dataclass(frozen=True)
class InitializeRequest:
    id: Any
    method: Literal["initialize"] = "initialize"


@dataclass(frozen=True)
class CallToolRequest:
    id: Any
    name: Any
    parameters: Any
    method: Literal["callTool"] = "callTool"


@dataclass(frozen=True)
class TerminateRequest:
    id: Any
    method: Literal["terminate"] = "terminate"


RpcRequest = Union[InitializeRequest, CallToolRequest, TerminateRequest]
