"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union
from datetime import datetime


class CreateLinkRequest(BaseModel):
    """Request to shorten a URL.

    Both fields are optional at the schema level so that a missing
    ``long_url`` is reported by the store with its own message.
    """

    long_url: Optional[str] = Field(None, description="The URL to shorten")
    pin: Optional[Union[str, int]] = Field(None, description="Optional 4-digit PIN")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "long_url": "https://example.com/very/long/path/to/resource",
                },
                {
                    "long_url": "https://github.com/user/repo",
                    "pin": "1234"
                }
            ]
        }
    }


class CreateLinkResponse(BaseModel):
    """Response after shortening a URL."""

    id: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    long_url: str = Field(..., description="The original long URL")
    created: datetime = Field(..., description="Creation timestamp (UTC)")
    expires: datetime = Field(..., description="Expiry timestamp (UTC)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "aB3xYz",
                    "short_url": "https://short.link/aB3xYz",
                    "long_url": "https://example.com/very/long/path",
                    "created": "2024-01-01T12:00:00Z",
                    "expires": "2024-01-31T12:00:00Z"
                }
            ]
        }
    }


class LinkLookupResponse(BaseModel):
    """What a lookup reveals about a link.

    ``long_url`` is only present for links without a PIN.
    """

    model_config = ConfigDict(populate_by_name=True)

    requires_pin: bool = Field(..., alias="requiresPin")
    id: str
    long_url: Optional[str] = None


class VerifyPinRequest(BaseModel):
    """PIN submitted for a protected link."""

    pin: Optional[Union[str, int]] = Field(None, description="The link's 4-digit PIN")


class VerifyPinResponse(BaseModel):
    """Destination released after a successful PIN check."""

    long_url: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    links: int = Field(..., description="Links currently held in memory")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
