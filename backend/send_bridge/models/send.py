"""
Pydantic models for the /send relay.

Models:
  SendRequest      — inbound JSON body (camelCase on the wire)
  DeliveryPayload  — what the email client needs to send one message
  SendResponse     — success body
  ErrorResponse    — failure body (missing fields, bad links, pipeline errors)
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SendRequest(BaseModel):
    """
    Inbound /send body.

    Every field is optional at parse time so the route can answer with a
    single "Missing required fields" error instead of a per-field 422.
    Unknown fields are ignored.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    to_email: Optional[str] = Field(None, alias="toEmail")
    email_subject: Optional[str] = Field(None, alias="emailSubject")
    email_html: Optional[str] = Field(None, alias="emailHtml")
    drive_link1: Optional[str] = Field(None, alias="driveLink1")
    drive_link2: Optional[str] = Field(None, alias="driveLink2")
    merged_file_name: Optional[str] = Field(None, alias="mergedFileName")

    def missing_fields(self) -> list[str]:
        """Return the wire names of required fields that are absent or empty."""
        required = {
            "toEmail": self.to_email,
            "emailSubject": self.email_subject,
            "emailHtml": self.email_html,
            "driveLink1": self.drive_link1,
            "driveLink2": self.drive_link2,
        }
        return [name for name, value in required.items() if not value]


class DeliveryPayload(BaseModel):
    """One outbound email with a single base64 attachment."""

    to_email: str
    subject: str
    html: str
    attachment_name: str
    attachment_b64: str


class SendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    merged_size_mb: float = Field(alias="mergedSizeMB")
    brevo: dict[str, Any]


class ErrorResponse(BaseModel):
    ok: bool = False
    message: str
    error: Optional[str] = None            # underlying failure, pipeline errors only
    missing: Optional[list[str]] = None    # missing required fields
    detail: Optional[dict[str, Optional[str]]] = None  # {"id1": ..., "id2": ...}
