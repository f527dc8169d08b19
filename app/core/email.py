"""
Transactional email through Resend.
"""
import logging
from typing import Optional

import resend

from app.config import settings

logger = logging.getLogger(__name__)


def init_resend() -> bool:
    """Set the Resend API key. Returns False when email is not configured."""
    if not settings.resend_api_key:
        return False
    resend.api_key = settings.resend_api_key
    return True


def send_registration_confirmation(
    to_email: str,
    player_name: str,
    minecraft_username: str,
    event_title: str,
    event_date: Optional[str] = None,
    additional_info: Optional[str] = None,
) -> Optional[dict]:
    """
    Send the registration confirmation email to the player.

    Returns the Resend response, or None when email is not configured.
    Raises whatever Resend raises; callers treat a failure as non-fatal.
    """
    if not init_resend():
        logger.info("Resend not configured, skipping confirmation email to %s", to_email)
        return None

    date_html = (
        f'<p style="margin: 0; color: #888;">Event date:</p>'
        f'<p style="margin: 5px 0 0 0; font-size: 18px; color: #00d9ff; font-weight: bold;">{event_date}</p>'
        if event_date else ""
    )
    info_html = f"<p><strong>Additional info:</strong> {additional_info}</p>" if additional_info else ""

    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #0a0a0a; color: #ffffff;">
        <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #00d9ff; font-size: 32px; margin: 0;">{settings.site_name}</h1>
        </div>
        <div style="background-color: #1a1a1a; padding: 30px; border-radius: 10px; border: 1px solid #00d9ff;">
            <h2 style="color: #00d9ff; margin-top: 0;">Hi {player_name}!</h2>
            <p style="font-size: 16px; line-height: 1.6;">
                Your registration for <strong style="color: #00d9ff;">{event_title}</strong> is confirmed.
            </p>
            {date_html}
            <p><strong>Minecraft username:</strong> {minecraft_username}</p>
            {info_html}
            <p style="font-size: 14px; color: #888;">We will send more details about the event by email. See you soon!</p>
        </div>
    </div>
    """

    params = {
        "from": settings.email_from,
        "to": [to_email],
        "subject": f"Registration confirmed for {event_title}!",
        "html": html_content,
    }
    response = resend.Emails.send(params)
    logger.info("Confirmation email sent to %s", to_email)
    return response
