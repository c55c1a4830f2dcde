"""Email history schemas - Pydantic models for records and responses"""

from typing import Optional

from pydantic import BaseModel, Field


class SentEmail(BaseModel):
    """A sent email as stored in the history file"""

    id: float
    to: str
    subject: str
    message: str
    attachments: list[str] = Field(default_factory=list)
    messageId: Optional[str] = None
    status: str = "sent"
    sent_at: str


class SendEmailResponse(BaseModel):
    success: bool = True
    message: str = "Email sent successfully!"
    emailId: Optional[float]
    messageId: Optional[str]


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalEmails: int
    hasNext: bool
    hasPrev: bool


class EmailListResponse(BaseModel):
    success: bool = True
    emails: list[SentEmail]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
