"""
Email Service using the configured SMTP relay
Composes the outgoing message (plain text + MJML-rendered HTML + attachments)
and hands it to smtplib
"""

import asyncio
import io
import logging
import mimetypes
import smtplib
import ssl
from email import encoders
from email.errors import MessageError
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid, parseaddr
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from mjml import mjml_to_html

from . import config
from .email_templates import sent_email_template
from .shared.validators import clean_header

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP relay refuses or fails to take a message"""


def decrypt_password(encrypted: Optional[str]) -> str:
    """Decrypt SMTP password"""
    if not config.SMTP_ENCRYPTION_KEY or not encrypted:
        return encrypted or ""
    try:
        return Fernet(config.SMTP_ENCRYPTION_KEY).decrypt(encrypted.encode()).decode()
    except (InvalidToken, ValueError):
        logger.warning("SMTP_PASS is not a valid Fernet token, using it as plain text")
        return encrypted


def get_sender_address() -> str:
    """Bare address part of FROM_EMAIL, used for the SMTP envelope"""
    return parseaddr(config.FROM_EMAIL)[1] or config.FROM_EMAIL


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(io.StringIO(mjml_content))
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


def build_message(
    to: str,
    subject: str,
    message: str,
    attachments: Optional[list[dict]] = None,
) -> MIMEMultipart:
    """
    Build the MIME message for a composed email.

    Args:
        to: Recipient address
        subject: Email subject line
        message: Plain-text body as typed by the user
        attachments: Optional list of {"filename", "content", "content_type"} dicts

    Returns:
        multipart/mixed message with a Message-ID already assigned
    """
    attachments = attachments or []
    filenames = [attachment["filename"] for attachment in attachments]
    html_content = compile_mjml_to_html(sent_email_template(subject, message, filenames))

    sender = config.FROM_EMAIL
    domain = get_sender_address().rpartition("@")[2] or "localhost"

    msg = MIMEMultipart("mixed")
    msg["Subject"] = clean_header(subject)
    msg["From"] = sender
    msg["To"] = to
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid(domain=domain)

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(message, "plain", "utf-8"))
    body.attach(MIMEText(html_content, "html", "utf-8"))
    msg.attach(body)

    for attachment in attachments:
        content_type = (
            attachment.get("content_type")
            or mimetypes.guess_type(attachment["filename"])[0]
            or "application/octet-stream"
        )
        maintype, _, subtype = content_type.partition("/")
        part = MIMEBase(maintype, subtype or "octet-stream")
        part.set_payload(attachment["content"])
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=attachment["filename"])
        msg.attach(part)

    return msg


def _tls_context() -> ssl.SSLContext:
    # Relays such as MailHog use self-signed certificates
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def open_smtp_connection() -> smtplib.SMTP:
    """Connect (and authenticate, when credentials are configured) to the relay"""
    if config.SMTP_SECURE:
        server = smtplib.SMTP_SSL(
            config.SMTP_HOST, config.SMTP_PORT, context=_tls_context(), timeout=config.SMTP_TIMEOUT
        )
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT)

    try:
        if not config.SMTP_SECURE:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=_tls_context())
                server.ehlo()

        if config.SMTP_USER:
            server.login(config.SMTP_USER, decrypt_password(config.SMTP_PASS))
    except (smtplib.SMTPException, OSError):
        server.close()
        raise

    return server


def send_via_smtp(msg: MIMEMultipart, recipients: list[str]) -> dict:
    """Send an already-built message through the relay"""
    try:
        server = open_smtp_connection()
        try:
            server.sendmail(get_sender_address(), recipients, msg.as_string())
        finally:
            server.quit()
    except (smtplib.SMTPException, MessageError, OSError) as e:
        logger.error(f"❌ SMTP send failed via {config.SMTP_HOST}:{config.SMTP_PORT}: {e}")
        raise EmailDeliveryError(str(e)) from e

    logger.info(f"✅ Email sent successfully via {config.SMTP_HOST}: {msg['Message-ID']}")
    return {"messageId": msg["Message-ID"], "success": True}


async def send_email(
    to: str,
    subject: str,
    message: str,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """
    Send an email through the configured SMTP relay

    Args:
        to: Recipient email
        subject: Email subject line
        message: Plain-text body (an HTML version is rendered from it)
        attachments: Optional list of attachments

    Returns:
        Send response dict with the transport message id
    """
    msg = build_message(to=to, subject=subject, message=message, attachments=attachments)
    logger.info(f"📧 Sending email to: {to} ({len(attachments or [])} attachment(s))")
    return await asyncio.to_thread(send_via_smtp, msg, [to])


def verify_smtp_connection() -> tuple[bool, str]:
    """
    Check that the relay accepts connections.
    Returns (success, message)
    """
    try:
        server = open_smtp_connection()
        try:
            server.noop()
        finally:
            server.quit()
        return True, "SMTP server is ready"
    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP auth error: {e}")
        return False, "Authentication failed. Check SMTP_USER and SMTP_PASS."
    except ssl.SSLError as e:
        logger.error(f"SSL error: {e}")
        return False, "SSL/TLS error. Check SMTP_SECURE and SMTP_PORT."
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP connection error: {e}")
        return False, f"Could not connect to {config.SMTP_HOST}:{config.SMTP_PORT}: {e}"
