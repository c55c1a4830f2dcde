"""Email router - FastAPI endpoints for sending email and browsing history"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse

from ... import config
from ...email_service import EmailDeliveryError
from .repository import EmailRepository
from .schemas import EmailListResponse, MessageResponse, SendEmailResponse, SentEmail
from .service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Emails"])


def get_email_repository() -> EmailRepository:
    """Dependency injection for the history store"""
    return EmailRepository(config.EMAILS_DB_PATH)


def get_email_service(repo: EmailRepository = Depends(get_email_repository)) -> EmailService:
    """Dependency injection for EmailService"""
    return EmailService(repo)


async def read_uploads(files: list[UploadFile]) -> list[dict]:
    """
    Read multipart uploads into attachment dicts.

    Count, size and type are checked from the upload metadata first, so
    oversized or surplus files are rejected before their contents are read.
    """
    EmailService.validate_attachments(
        [{"filename": file.filename, "size": file.size or 0} for file in files]
    )

    uploads = []
    for file in files:
        content = await file.read()
        uploads.append(
            {
                "filename": file.filename,
                "content": content,
                "content_type": file.content_type,
                "size": len(content),
            }
        )

    EmailService.validate_attachments(uploads)
    return uploads


@router.post("/send-email", response_model=SendEmailResponse)
async def send_email(
    to: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    attachments: Optional[list[UploadFile]] = File(None),
    service: EmailService = Depends(get_email_service),
):
    """Send an email with up to 5 attachments and record it in history"""
    # Empty file inputs arrive as parts without a filename
    files = [file for file in attachments or [] if file.filename]

    try:
        to, subject = service.validate_fields(to, subject, message)
        uploads = await read_uploads(files)
    except ValueError as e:
        logger.warning(f"Rejected send request: {e}")
        return JSONResponse(status_code=400, content={"success": False, "message": str(e)})

    try:
        result = await service.send_email(to, subject, message, uploads)
    except EmailDeliveryError as e:
        logger.error(f"Error sending email: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": f"Failed to send email: {str(e)}"},
        )

    return SendEmailResponse(emailId=result["emailId"], messageId=result["messageId"])


@router.get("/emails", response_model=EmailListResponse)
async def get_emails(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: EmailService = Depends(get_email_service),
):
    """Get one page of sent-email history, newest first"""
    return service.list_emails(page, limit)


@router.get("/emails/{email_id}", response_model=SentEmail)
async def get_email(
    email_id: str,
    service: EmailService = Depends(get_email_service),
):
    """Get a single sent email"""
    email = service.get_email(email_id)
    if not email:
        return JSONResponse(status_code=404, content={"error": "Email not found"})
    return email


@router.delete("/emails/{email_id}", response_model=MessageResponse)
async def delete_email(
    email_id: str,
    service: EmailService = Depends(get_email_service),
):
    """Delete a sent email from history"""
    if not service.delete_email(email_id):
        return JSONResponse(status_code=404, content={"error": "Email not found"})
    return MessageResponse(message="Email deleted successfully")
