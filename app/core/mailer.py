import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from app.core.config import settings

logger = logging.getLogger(__name__)

_OTP_TEMPLATE = """
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6;">
                <p>{intro}</p>
                <p>Please use the following code:</p>
                <h2 style="color: #2c3e50; font-size: 28px; letter-spacing: 3px; text-align: center;">
                    {code}
                </h2>
                <p>This code will expire in <b>{minutes} minutes</b>.</p>
                <br>
                <p>If you did not make this request, please ignore this email.</p>
            </body>
        </html>
        """


def _send(to_email: str, subject: str, html_content: str) -> bool:
    if not settings.sendgrid_api_key or not settings.sendgrid_from_email:
        logger.warning(f"SendGrid is not configured, skipping '{subject}' for {to_email}")
        return False
    try:
        message = Mail(
            from_email=settings.sendgrid_from_email,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        sg = SendGridAPIClient(settings.sendgrid_api_key)
        response = sg.send(message)
        logger.info(f"'{subject}' sent to {to_email}, status: {response.status_code}")
        return True
    except Exception:
        logger.exception(f"Failed to send '{subject}' to {to_email}")
        return False


def send_verify_email_otp(to_email: str, otp: str):
    """Send the registration code using SendGrid"""
    html_content = _OTP_TEMPLATE.format(
        intro="We received a request to register an account.",
        code=otp,
        minutes=settings.otp_expire_minutes,
    )
    return _send(to_email, "Your Verification Code", html_content)


def send_reset_email(to_email: str, reset_code: str):
    """Send the password reset code using SendGrid"""
    html_content = _OTP_TEMPLATE.format(
        intro="We received a request to reset your password.",
        code=reset_code,
        minutes=15,
    )
    return _send(to_email, "Your Password Reset Code", html_content)
