"""
Record types exchanged with the document store.

Decoding is tolerant: fields the models do not know are ignored, except on
resource records whose payload is open-ended and kept as extras. Scalar
values in text fields (numbers, booleans) are read as their string form;
only structurally wrong documents fail to decode.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _scalar_to_text(value: Any) -> Any:
    """Stringify numbers and booleans; anything else is left for validation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ResourceQuery(BaseModel):
    """
    A resource subscription stored under Users/{id}/queries.

    The schema is owned by the client application; unknown fields are kept.
    """
    model_config = ConfigDict(extra="allow")

    resource: Optional[str] = Field(default=None, description="Resource category queried")
    state: Optional[str] = Field(default=None, description="State filter")
    district: Optional[str] = Field(default=None, description="District filter")

    @field_validator("resource", "state", "district", mode="before")
    @classmethod
    def scalars_as_text(cls, v):
        return _scalar_to_text(v)


class User(BaseModel):
    """A registered user with its nested resource queries."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default="", description="Document key under Users")
    token: Optional[str] = Field(default=None, description="Push notification token")
    queries: List[ResourceQuery] = Field(default_factory=list)

    @field_validator("token", mode="before")
    @classmethod
    def token_as_text(cls, v):
        return _scalar_to_text(v)


class ResourceData(BaseModel):
    """
    A single resource entry (e.g. a food or oxygen supplier).

    Only state and district are interpreted; everything else is payload.
    A null state or district reads as "".
    """
    model_config = ConfigDict(extra="allow")

    state: str = ""
    district: str = ""

    @field_validator("state", "district", mode="before")
    @classmethod
    def location_as_text(cls, v):
        if v is None:
            return ""
        return _scalar_to_text(v)


class Data(BaseModel):
    """A named resource document holding an ordered list of entries."""
    model_config = ConfigDict(extra="ignore")

    data: List[ResourceData] = Field(default_factory=list)
