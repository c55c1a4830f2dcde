import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# SMTP relay Configuration (defaults target a local MailHog container)
SMTP_HOST = os.getenv("SMTP_HOST", "mailhog")
SMTP_PORT = int(os.getenv("SMTP_PORT") or 1025)
SMTP_SECURE = os.getenv("SMTP_SECURE", "false").lower() == "true"
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT") or 30)

# Optional Fernet key; when set, SMTP_PASS is stored encrypted
# (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
SMTP_ENCRYPTION_KEY = os.getenv("SMTP_ENCRYPTION_KEY")

FROM_EMAIL = os.getenv("FROM_EMAIL", "admin@localhost")

# JSON file holding the sent-email history
EMAILS_DB_PATH = Path(os.getenv("EMAILS_DB_PATH", "data/emails.json"))

# Attachment limits
MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_ATTACHMENT_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".pdf",
    ".doc",
    ".docx",
    ".txt",
    ".zip",
    ".rar",
    ".xlsx",
    ".xls",
    ".ppt",
    ".pptx",
)

# Server
PORT = int(os.getenv("PORT") or 3000)
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000"
).split(",")
