"""
BookingDesk Backend — Business Schemas
========================================

What:  API contract and stored shape of a business.
Who:   The business router (request/response) and its Repository (storage).

`category` is a plain string on every model. Membership in the Category
enumeration is checked by the handlers so the messages stay rule-specific
("invalid category") instead of Pydantic's generic enum errors.
"""

from typing import Optional

from pydantic import BaseModel, Field

from bookingdesk.schemas.common import DocumentModel, ImageOwnerModel


class Business(ImageOwnerModel):
    """A business as stored and as returned by the API."""

    id: str = Field(description="Store-assigned identifier")
    name: str
    category: str
    user_id: str = Field(default="", description="Principal that created the business")


class BusinessCreate(BaseModel):
    """
    Body of POST /businesses/.

    Missing fields decode to empty strings so the handler can answer with
    the specific rule that failed.
    """

    name: str = ""
    category: str = ""


class BusinessFilter(DocumentModel):
    """Equality predicates accepted by GET /businesses/."""

    category: Optional[str] = None
