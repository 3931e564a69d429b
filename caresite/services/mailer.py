from __future__ import annotations
import logging, smtplib
from email.message import EmailMessage
from email.utils import formataddr

from ..config import Settings
from ..errors import MailError

log = logging.getLogger("mailer")

AUTO_REPLY_TEMPLATE = (
    "Hi {name},\n"
    "\n"
    "Thanks for your message! I’ll get back to you as soon as I can.\n"
    "\n"
    "— {owner}\n"
)


class Mailer:
    """Contact-form relay: one note to the site operator, one auto-reply to the sender."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_messages(self, name: str, email: str, message: str) -> list[EmailMessage]:
        s = self.settings

        to_operator = EmailMessage()
        to_operator["Subject"] = f"New message from {name}"
        to_operator["From"] = formataddr(("Website Contact", s.email_user))
        to_operator["To"] = s.operator_address
        if email:
            to_operator["Reply-To"] = email
        to_operator.set_content(f"From: {name} <{email}>\n\n{message}")

        to_sender = EmailMessage()
        to_sender["Subject"] = "Thanks for reaching out"
        to_sender["From"] = formataddr((s.site_name, s.email_user))
        to_sender["To"] = email
        to_sender.set_content(AUTO_REPLY_TEMPLATE.format(name=name, owner=s.site_owner))

        return [to_operator, to_sender]

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.smtp_ssl:
            return smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout)
        return smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout)

    def send_contact(self, name: str, email: str, message: str):
        s = self.settings
        if not (s.email_user and s.email_password):
            raise MailError("mail credentials are not configured")

        try:
            # header values reject CR/LF, so building can fail as well as sending
            messages = self.build_messages(name, email, message)
            with self._connect() as smtp:
                if not s.smtp_ssl:
                    smtp.starttls()
                smtp.login(s.email_user, s.email_password)
                for m in messages:
                    smtp.send_message(m)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            log.error("Error sending email to %s: %s", email, e)
            raise MailError("failed to send contact email") from e
