"""
BookingDesk Backend — Client Schemas
======================================
"""

from pydantic import AliasChoices, BaseModel, Field

from bookingdesk.schemas.common import DocumentModel, ImageOwnerModel


class Client(ImageOwnerModel):
    """A client as stored and as returned by the API."""

    id: str = Field(description="Store-assigned identifier")
    first_name: str
    last_name: str
    user_id: str = Field(default="", description="Principal that created the client")


class ClientCreate(BaseModel):
    """Body of POST /clients/. Accepts camelCase and all-lowercase keys."""

    first_name: str = Field(
        default="",
        validation_alias=AliasChoices("firstName", "firstname", "first_name"),
    )
    last_name: str = Field(
        default="",
        validation_alias=AliasChoices("lastName", "lastname", "last_name"),
    )


class ClientFilter(DocumentModel):
    """Clients are always listed unfiltered."""
