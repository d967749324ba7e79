#!/usr/bin/env python3
"""
DC Health Report - Report Mailer
Sends the rendered HTML report as the body of an email.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import List, Optional

from .config import Config
from .credential_manager import CredentialSealer
from .exceptions import CredentialError, NotificationError
from .logger import get_logger


@dataclass
class MailSettings:
    """Mail submission settings, loaded once per run."""
    to_addrs: List[str]
    from_addr: str
    subject: str
    smtp_server: str
    port: int = 25
    use_tls: bool = False
    authenticate: bool = False
    username: str = ''
    password: str = ''

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks
        return (f"MailSettings(to={self.to_addrs}, from={self.from_addr!r}, "
                f"server={self.smtp_server}:{self.port}, tls={self.use_tls}, "
                f"auth={self.authenticate}, user={self.username!r})")


def load_mail_settings(config: Config,
                       sealer: Optional[CredentialSealer] = None) -> MailSettings:
    """Build MailSettings from the config's mail section.

    The password is unsealed here, and only when authentication is on.
    """
    section = config.get_mail_section()
    to_addrs = section.get('to') or []
    if isinstance(to_addrs, str):
        to_addrs = [addr.strip() for addr in to_addrs.split(',') if addr.strip()]

    settings = MailSettings(
        to_addrs=list(to_addrs),
        from_addr=section.get('from', ''),
        subject=section.get('subject', 'Active Directory Health Report'),
        smtp_server=section.get('smtp_server', 'localhost'),
        port=int(section.get('port', 25)),
        use_tls=bool(section.get('use_tls', False)),
        authenticate=bool(section.get('authenticate', False)),
        username=section.get('username', '') or '',
    )
    if settings.authenticate:
        settings.password = (sealer or CredentialSealer()).unseal()
    return settings


class ReportMailer:
    """Dispatches the report through SMTP."""

    def __init__(self, settings: MailSettings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or get_logger('Mail')

    def build_message(self, html_body: str) -> MIMEMultipart:
        message = MIMEMultipart('alternative')
        message['From'] = self.settings.from_addr
        message['To'] = ', '.join(self.settings.to_addrs)
        message['Subject'] = self.settings.subject
        message.attach(MIMEText(html_body, 'html', 'utf-8'))
        return message

    def send_report(self, report_path: Path):
        """Read the report file back and mail it as the message body.

        Raises NotificationError on any failure.
        """
        if not self.settings.to_addrs:
            raise NotificationError("No recipient addresses configured")

        try:
            html_body = Path(report_path).read_text(encoding='utf-8')
        except OSError as e:
            raise NotificationError(f"Could not read report {report_path}: {e}") from e

        message = self.build_message(html_body)
        try:
            with smtplib.SMTP(self.settings.smtp_server, self.settings.port,
                              timeout=30) as server:
                if self.settings.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.settings.authenticate:
                    server.login(self.settings.username, self.settings.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"{type(e).__name__}: {e}") from e

        self.logger.info(f"Report mailed to {', '.join(self.settings.to_addrs)}")


def send_report(config: Config, report_path: Path,
                sealer: Optional[CredentialSealer] = None,
                logger: Optional[logging.Logger] = None):
    """Load mail settings and send the report. Raises NotificationError."""
    try:
        settings = load_mail_settings(config, sealer)
    except CredentialError as e:
        raise NotificationError(f"Mail credential unavailable: {e}") from e
    ReportMailer(settings, logger).send_report(report_path)
