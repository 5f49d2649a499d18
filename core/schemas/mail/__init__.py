"""Mail schemas."""

from pydantic import EmailStr, Field

from core.schemas.base_schema_model import BaseSchemaModel


class MailRequest(BaseSchemaModel):
    """An email to send."""

    to_mail: EmailStr
    subject: str = Field(..., min_length=1)
    body: str = ""


__all__ = ["MailRequest"]
