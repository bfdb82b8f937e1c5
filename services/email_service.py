import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from core.config import settings
from core.exceptions import ExternalServiceError
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


def send_email(to_email: str, subject: str, body: str):
    """
    Sends an HTML email over SMTP.

    Raises:
        ExternalServiceError: If the SMTP server cannot be reached or rejects the message
    """
    # Skip email sending in test environment
    if settings.ENV == "testing":
        logger.info(
            "[TEST MODE] Email skipped",
            extra={"recipient": to_email, "subject": subject}
        )
        return

    logger.debug(
        "Attempting to send email",
        extra={"recipient": to_email, "subject": subject}
    )

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = settings.MAIL_FROM
    message["To"] = to_email
    message.attach(MIMEText(body, "html"))

    try:
        with smtplib.SMTP(settings.MAIL_SERVER, settings.MAIL_PORT) as server:
            server.starttls()  # Upgrade to secure connection
            server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
            server.sendmail(settings.MAIL_FROM, to_email, message.as_string())

        logger.info(
            "Email sent successfully",
            extra={"recipient": to_email, "subject": subject}
        )

    except (smtplib.SMTPException, OSError) as e:
        logger.error(
            f"Failed to send email: {str(e)}",
            extra={
                "recipient": to_email,
                "subject": subject,
                "error": str(e),
                "error_type": type(e).__name__
            },
            exc_info=True
        )
        raise ExternalServiceError("Failed to send email") from e


def send_verification_email(to_email: str, code: str):
    subject = "Verify Your Email - Food Marketplace"
    body = f"""
    <html>
    <body>
        <h2>Welcome to the Food Marketplace!</h2>
        <p>Your verification code is:</p>
        <h1 style="color: #4CAF50; font-size: 32px; letter-spacing: 4px;">{code}</h1>
        <p>This code will expire in {settings.VERIFICATION_CODE_EXPIRE_MINUTES} minute(s).</p>
        <p>If you didn't create an account, please ignore this email.</p>
    </body>
    </html>
    """
    send_email(to_email=to_email, subject=subject, body=body)


def send_password_reset_email(to_email: str, token: str, reset_link: str):
    subject = "Password Reset Request - Food Marketplace"
    body = f"""
    <html>
    <body>
        <h2>Password Reset Request</h2>
        <p>We received a request to reset your password. Click the link below to choose a new one:</p>
        <p><a href="{reset_link}">Reset your password</a></p>
        <p>Or use this token: <code>{token}</code></p>
        <p>This link will expire in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.</p>
        <p>If you didn't request a password reset, please ignore this email.</p>
    </body>
    </html>
    """
    send_email(to_email=to_email, subject=subject, body=body)
