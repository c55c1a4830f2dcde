"""Email domain - Sending emails and browsing the sent-email history"""

from .router import router

__all__ = ["router"]
