"""Email history service - Business logic for sending and browsing sent emails"""

import logging
from typing import Any, Optional

from ...config import MAX_ATTACHMENTS
from ...email_service import send_email
from ...shared.validators import clean_header, validate_attachment, validate_email
from .repository import EmailRepository, StoreError

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def parse_positive_int(value: Optional[str], default: int) -> int:
    """Query-string integer that falls back to the default when missing or invalid"""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class EmailService:
    """Service layer for the compose form and the history browser"""

    def __init__(self, repo: EmailRepository):
        self.repo = repo

    @staticmethod
    def validate_fields(
        to: Optional[str],
        subject: Optional[str],
        message: Optional[str],
    ) -> tuple[str, str]:
        """
        Validate the text fields of the compose form.

        Returns:
            (recipient, subject), both cleaned for use as header values

        Raises:
            ValueError: With the message shown to the user
        """
        if not (to or "").strip() or not clean_header(subject) or not (message or "").strip():
            raise ValueError("To, subject, and message are required fields")

        return validate_email(to), clean_header(subject)

    @staticmethod
    def validate_attachments(attachments: list[dict]) -> None:
        """Check count, size and type of {"filename", "size"} attachment dicts"""
        if len(attachments) > MAX_ATTACHMENTS:
            raise ValueError(f"Too many files. Maximum is {MAX_ATTACHMENTS}")

        for attachment in attachments:
            validate_attachment(attachment["filename"], attachment["size"])

    @classmethod
    def validate_compose(
        cls,
        to: Optional[str],
        subject: Optional[str],
        message: Optional[str],
        attachments: list[dict],
    ) -> tuple[str, str]:
        """Validate the whole compose form; returns the cleaned (recipient, subject)"""
        to, subject = cls.validate_fields(to, subject, message)
        cls.validate_attachments(attachments)
        return to, subject

    async def send_email(
        self,
        to: Optional[str],
        subject: Optional[str],
        message: Optional[str],
        attachments: Optional[list[dict]] = None,
    ) -> dict[str, Any]:
        """Validate, dispatch through SMTP, then record the sent email"""
        attachments = attachments or []
        to, subject = self.validate_compose(to, subject, message, attachments)

        logger.info(f"📤 Sending email to: {to}")
        logger.info(f"Attachments: {len(attachments)}")

        result = await send_email(to=to, subject=subject, message=message, attachments=attachments)

        # The message is already delivered; a history write failure does not undo that
        try:
            email_id = self.repo.add_email(
                {
                    "to": to,
                    "subject": subject,
                    "message": message,
                    "attachments": [attachment["filename"] for attachment in attachments],
                    "messageId": result["messageId"],
                    "status": "sent",
                }
            )
        except StoreError as e:
            logger.error(f"Email {result['messageId']} sent but not saved to history: {e}")
            email_id = None

        return {"emailId": email_id, "messageId": result["messageId"]}

    def list_emails(self, page: Optional[str] = None, limit: Optional[str] = None) -> dict[str, Any]:
        """One page of history with pagination metadata"""
        page_number = parse_positive_int(page, DEFAULT_PAGE)
        page_size = min(parse_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)

        result = self.repo.get_emails(page_number, page_size)
        return {
            "success": True,
            "emails": result["emails"],
            "pagination": {
                "currentPage": result["page"],
                "totalPages": result["total_pages"],
                "totalEmails": result["total"],
                "hasNext": result["page"] < result["total_pages"],
                "hasPrev": result["page"] > 1,
            },
        }

    def get_email(self, email_id: str) -> Optional[dict[str, Any]]:
        return self.repo.get_email_by_id(email_id)

    def delete_email(self, email_id: str) -> bool:
        deleted = self.repo.delete_email_by_id(email_id)
        if deleted:
            logger.info(f"🗑️ Deleted email {email_id} from history")
        return deleted
