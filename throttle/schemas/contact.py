"""Pydantic schemas for the contact-form endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContactSubmission(BaseModel):
    """Contact form payload.

    Surrounding whitespace is stripped before length checks.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        pattern=r"^[a-zA-Z\s'-]+$",
        description="Sender name (letters, spaces, apostrophes and hyphens).",
    )
    email: str = Field(
        ...,
        max_length=255,
        pattern=r"^\S+@\S+\.\S+$",
        description="Sender email address; stored lower-cased.",
    )
    subject: str = Field(..., min_length=3, max_length=200)
    message: str = Field(..., min_length=10, max_length=5000)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class ContactResponse(BaseModel):
    """Acknowledgement returned after a submission is accepted."""

    success: bool = True
    message: str = "Contact message submitted successfully"
    id: str = Field(..., description="Identifier assigned to the submission.")
