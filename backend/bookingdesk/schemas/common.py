"""
BookingDesk Backend — Shared Pydantic Schemas
===============================================

What:  Base model for stored records plus the response envelopes every
       resource shares (errors, acknowledgements, health).
How:   Records use camelCase on the wire and in the document store; Python
       code uses snake_case attributes. `populate_by_name` accepts both.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """
    Base for every record and list filter kept in the document store.

    `model_dump(by_alias=True)` yields exactly the keys persisted in the
    store, so list filters and stored bodies agree on field names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageOwnerModel(DocumentModel):
    """Records that carry an image collection (businesses and clients)."""

    images: List[str] = Field(
        default_factory=list,
        description="Image URLs in upload order (<bucket>/<record id>/<key>)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  The single error shape returned by every endpoint.
    Example:
        {"error": "invalid category"}
    """
    error: str = Field(description="Human-readable error message")


class MessageResponse(BaseModel):
    """Acknowledgement for operations that return no record (delete)."""
    message: str


class ImageUploadResponse(BaseModel):
    """Returned after an image was stored and appended to its record."""
    message: str = Field(default="success")
    image: str = Field(description="URL appended to the record's images")


class StoredImage(DocumentModel):
    """One image of a record as returned by the image listing."""
    url: str = Field(description="URL as recorded in the record's images")
    size: int = Field(description="Length of the stored image in bytes")
    data: str = Field(description="Base64-encoded image bytes")


class HealthResponse(DocumentModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    document_store: str = Field(description="connected, disconnected")
    object_store: str = Field(description="available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
