"""Outbound email over SMTP and the HTML bodies we send."""
import html
import smtplib
from email.message import EmailMessage

from .config import settings
from .exceptions import MailDeliveryException
from .logging_config import get_logger

logger = get_logger(__name__)


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Send an HTML email. Returns False when SMTP is not configured (dev)."""
    if not settings.SMTP_HOST:
        logger.warning("SMTP_HOST not set; not sending %r to %s", subject, to)
        return False

    msg = EmailMessage()
    msg["From"] = settings.MAIL_FROM
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML capable mail client.")
    msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("sending %r to %s failed: %s", subject, to, e)
        raise MailDeliveryException(f"Failed to send email: {e}")
    return True


_RESET_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <style>
        body {{ font-family: Arial, sans-serif; background-color: #f4f4f4; margin: 0; padding: 0; color: #333; }}
        .container {{ max-width: 600px; margin: 20px auto; background: #ffffff; padding: 20px; border-radius: 8px; }}
        .header {{ text-align: center; padding-bottom: 20px; border-bottom: 1px solid #eee; }}
        .header h1 {{ color: #007bff; font-size: 24px; margin: 0; }}
        .content {{ padding: 20px; text-align: center; }}
        .reset-code {{ display: inline-block; font-size: 24px; font-weight: bold; color: #007bff;
                       background: #f8f9fa; padding: 10px 20px; border-radius: 5px; margin: 20px 0; }}
        .footer {{ text-align: center; padding-top: 20px; border-top: 1px solid #eee; font-size: 14px; color: #666; }}
        .button {{ display: inline-block; padding: 10px 20px; background-color: #007bff; color: #ffffff;
                   text-decoration: none; border-radius: 5px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header"><h1>JobTracker Password Reset</h1></div>
        <div class="content">
            <p>Dear {full_name},</p>
            <p>We received a request to reset your JobTracker account password.
               Please use the following 6-digit code to reset your password:</p>
            <div class="reset-code">{code}</div>
            <p>This code is valid for {ttl_minutes} minutes. If you did not request a password reset,
               please ignore this email or contact our support team.</p>
            <a href="{frontend_url}/reset-password" class="button">Reset Password</a>
        </div>
        <div class="footer">
            <p>Best regards,<br>JobTracker Support Team</p>
        </div>
    </div>
</body>
</html>
"""


def render_reset_password(full_name: str, code: str) -> str:
    return _RESET_TEMPLATE.format(
        full_name=html.escape(full_name),
        code=html.escape(code),
        ttl_minutes=settings.RESET_CODE_TTL_MINUTES,
        frontend_url=settings.FRONTEND_URL.rstrip("/"),
    )
