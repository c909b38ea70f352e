import html
from typing import Optional

from pydantic import BaseModel

BRAND_NAME = "Switch With Me"
DEFAULT_MATCH_BLURB = "Someone is looking for what you have and has what you need!"


class EmailContent(BaseModel):
    subject: str
    text: str
    html: str


def _greeting_name(user_name: Optional[str]) -> str:
    return user_name or "there"


def _footer(base_url: str) -> str:
    return (
        f"Thanks,\nThe {BRAND_NAME} Team\n\n"
        f"---\nTo turn off email notifications, visit {base_url}/profile"
    )


def _html_layout(user_name: str, paragraphs: list, button_label: str, button_url: str, base_url: str) -> str:
    safe_name = html.escape(user_name)
    safe_url = html.escape(button_url, quote=True)
    body = "\n".join(f'        <p style="margin: 0 0 12px 0;">{p}</p>' for p in paragraphs)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #374151;">
    <div style="max-width: 560px; margin: 0 auto; padding: 20px;">
        <p style="margin: 0 0 12px 0;">Hi {safe_name},</p>
{body}
        <p style="margin: 20px 0;">
            <a href="{safe_url}" style="background: #2563eb; color: #ffffff; padding: 10px 18px; border-radius: 8px; text-decoration: none;">{button_label}</a>
        </p>
        <p style="font-size: 12px; color: #6b7280;">
            To turn off email notifications, visit <a href="{html.escape(base_url, quote=True)}/profile">your profile</a>.
        </p>
    </div>
</body>
</html>"""


class NotificationMessageBuilder:
    """Builds the email copies of in-app notifications."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def conversation_url(self, conversation_id: str) -> str:
        return f"{self.base_url}/conversations/{conversation_id}"

    def matches_url(self) -> str:
        return f"{self.base_url}/matches"

    def build_message_email(
        self,
        user_name: Optional[str],
        sender_name: str,
        preview: str,
        conversation_id: str
    ) -> EmailContent:
        name = _greeting_name(user_name)
        url = self.conversation_url(conversation_id)
        text = (
            f"Hi {name},\n\n"
            f"{sender_name} sent you a message:\n\n"
            f"\"{preview}\"\n\n"
            f"Reply here: {url}\n\n"
            f"{_footer(self.base_url)}"
        )
        paragraphs = [
            f"<strong>{html.escape(sender_name)}</strong> sent you a message:",
            f"&ldquo;{html.escape(preview)}&rdquo;",
        ]
        return EmailContent(
            subject=f"New message on {BRAND_NAME}",
            text=text,
            html=_html_layout(name, paragraphs, "Reply", url, self.base_url),
        )

    def build_match_email(self, user_name: Optional[str], description: Optional[str]) -> EmailContent:
        name = _greeting_name(user_name)
        url = self.matches_url()
        blurb = description or DEFAULT_MATCH_BLURB
        text = (
            f"Hi {name},\n\n"
            f"Great news! We found a potential match for your seat swap.\n\n"
            f"{blurb}\n\n"
            f"View your matches here: {url}\n\n"
            f"Don't wait too long, good matches go fast!\n\n"
            f"{_footer(self.base_url)}"
        )
        paragraphs = [
            "Great news! We found a potential match for your seat swap.",
            html.escape(blurb),
            "Don't wait too long, good matches go fast!",
        ]
        return EmailContent(
            subject="You have a new seat match suggestion!",
            text=text,
            html=_html_layout(name, paragraphs, "View Swap", url, self.base_url),
        )
