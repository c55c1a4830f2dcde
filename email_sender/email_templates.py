"""
MJML layout for outgoing emails.
Compiled to HTML by email_service before sending.
"""

from typing import Optional

from .utils.sanitization import sanitize_string, text_to_html

THEME = {
    "background": "#f8fafc",
    "card_bg": "#f9f9f9",
    "text_primary": "#333333",
    "text_secondary": "#555555",
    "text_muted": "#666666",
    "footer": "#999999",
    "border": "#eeeeee",
}

FOOTER_TEXT = "Sent via Email Sender App"


def attachments_section(filenames: Optional[list[str]]) -> str:
    """Attachment list shown under the message body, empty when there are none"""
    if not filenames:
        return ""

    items = "".join(f"<li>{sanitize_string(name)}</li>" for name in filenames)
    return f"""
        <mj-section padding="20px 0 0 0">
          <mj-column>
            <mj-text font-size="16px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 8px 0">
              📎 Attachments ({len(filenames)}):
            </mj-text>
            <mj-text color="{THEME['text_muted']}" padding="0">
              <ul>{items}</ul>
            </mj-text>
          </mj-column>
        </mj-section>
        """


def sent_email_template(
    subject: str,
    message: str,
    attachment_names: Optional[list[str]] = None,
) -> str:
    """MJML template wrapping a user-composed message"""
    safe_subject = sanitize_string(subject)

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{safe_subject}</mj-title>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body width="600px" background-color="#ffffff">
        <mj-section padding="20px 0 0 0">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 16px 0">
              {safe_subject}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Message body -->
        <mj-section background-color="{THEME['card_bg']}" padding="20px">
          <mj-column>
            <mj-text padding="0">
              {text_to_html(message)}
            </mj-text>
          </mj-column>
        </mj-section>

        {attachments_section(attachment_names)}

        <!-- Footer -->
        <mj-section padding="20px 0">
          <mj-column>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 20px 0" />
            <mj-text font-size="12px" color="{THEME['footer']}" padding="0">
              {FOOTER_TEXT}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """
