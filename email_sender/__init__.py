"""Email Sender - compose, send and browse emails through an SMTP relay"""

__version__ = "1.0.0"
