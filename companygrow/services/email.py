import logging
import smtplib
from email.message import EmailMessage

from companygrow.core.config import SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM

log = logging.getLogger("email")


def smtp_configured() -> bool:
    return bool(SMTP_HOST and SMTP_USER and SMTP_PASS)


def send_email(to_email: str, subject: str, body: str) -> None:
    """Envía por SMTP con STARTTLS; en desarrollo solo deja el correo en el log."""
    if not smtp_configured():
        log.info("[DEV EMAIL] to=%s | %s | %s", to_email, subject, body)
        return

    msg = EmailMessage()
    msg["From"] = SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as s:
        s.starttls()
        s.login(SMTP_USER, SMTP_PASS)
        s.send_message(msg)
    log.info("email '%s' sent to %s", subject, to_email)


def send_reset_code(to_email: str, code: str, ttl_seconds: int) -> None:
    send_email(
        to_email,
        "[CompanyGrow] Password reset code",
        f"Your password reset code is: {code}\n"
        f"It expires in {ttl_seconds // 60} minutes. Do not share this code with anyone.",
    )
