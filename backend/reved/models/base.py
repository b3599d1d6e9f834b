"""
Strict Base Model for API Request/Response Validation

This module provides base classes with strict validation settings to harden
the API contract between backend and frontend.

MOTIVATION:
    The frontend speaks the original French wire names (reussi, tempsSecondes,
    pointsGagnes...). Python code uses English field names and declares the
    wire name as the field alias. Responses are serialized by alias.

Usage:
    # For request bodies (strictest validation)
    class ItemCreate(StrictRequest):
        name: str = Field(..., alias="nom")

    # For response bodies (allows extra fields from DB)
    class ItemResponse(StrictResponse):
        id: int
        name: str = Field(..., alias="nom")

Architecture:
    API Request → StrictRequest (extra="forbid") → Route Handler
    DB Model → StrictResponse (extra="ignore") → Envelope → API Response
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class StrictRequest(BaseModel):
    """
    Base model for API request bodies with strict validation.

    Rejects any fields not explicitly declared in the model, catching
    frontend typos and mismatches at request time rather than runtime.

    Features:
        - extra="forbid": Unknown fields raise 422 Unprocessable Entity
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
        - populate_by_name=True: Accepts Python field names as well as aliases
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        validate_default=True,  # Validate defaults
        str_strip_whitespace=True,  # Clean string inputs
        populate_by_name=True,  # Field names or wire aliases
    )


class StrictResponse(BaseModel):
    """
    Base model for API response bodies.

    More lenient than StrictRequest to allow flexibility in response data.
    Still enforces type validation but allows extra fields.

    Features:
        - extra="ignore": Silently ignores extra fields (DB may have more columns)
        - validate_default=True: Validates default values
        - from_attributes=True: Allows ORM model conversion
        - populate_by_name=True: Services build responses with field names
    """

    model_config = ConfigDict(
        extra="ignore",  # Allow extra fields in responses
        validate_default=True,  # Validate defaults
        from_attributes=True,  # Enable ORM conversion
        populate_by_name=True,  # Field names or wire aliases
    )


class Envelope(StrictResponse, Generic[T]):
    """
    Standard success envelope: {success, data, message}.

    Example usage:
        @router.get("/{id}", response_model=Envelope[StudentProfile])
        async def get_student(...):
            return Envelope(data=profile, message="Student loaded")
    """

    success: bool = True
    data: T
    message: str = ""
