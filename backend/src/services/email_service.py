"""
E-posta Servisi
SMTP (STARTTLS) ile gönderim; bloklayan kısım worker thread'de çalışır
"""
from typing import List
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
import asyncio
import html
import smtplib
import ssl
import logging

from models.system_settings import EmailSettings

logger = logging.getLogger(__name__)

FOOTER = "Bu email Süreç Yönetimi Sistemi tarafından otomatik olarak gönderilmiştir."


def render_html(subject: str, content: str) -> str:
    body = html.escape(content).replace("\n", "<br>")
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">{html.escape(subject)}</h2>'
        f'<div style="margin: 20px 0; line-height: 1.6;">{body}</div>'
        f'<footer style="margin-top: 30px; color: #666; font-size: 12px;"><p>{FOOTER}</p></footer>'
        "</div>"
    )


class EmailService:
    """SMTP gönderici"""

    def __init__(self, config: EmailSettings):
        self.config = config

    def _deliver(self, recipients: List[str], subject: str, content: str) -> str:
        sender = self.config.from_email or self.config.smtp_user

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.config.from_name} <{sender}>"
        msg["To"] = ", ".join(recipients)
        msg["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] or None)
        msg.attach(MIMEText(content, "plain", "utf-8"))
        msg.attach(MIMEText(render_html(subject, content), "html", "utf-8"))

        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as server:
            if self.config.smtp_secure:
                server.starttls(context=ssl.create_default_context())
            server.login(self.config.smtp_user, self.config.smtp_pass)
            server.sendmail(sender, recipients, msg.as_string())
        return msg["Message-ID"]

    async def send_email(self, to: str, subject: str, content: str) -> dict:
        """
        E-posta gönder.
        Hata fırlatmaz; {success, message_id | error} döner.
        """
        if not self.config.smtp_pass:
            logger.info(f"SMTP şifresi yok, e-posta atlandı: {to} - {subject}")
            return {"success": False, "error": "Email ayarları yapılandırılmamış"}

        try:
            message_id = await asyncio.to_thread(self._deliver, [to], subject, content)
            logger.info(f"E-posta gönderildi: {to}")
            return {"success": True, "message_id": message_id}
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"E-posta gönderilemedi ({to}): {e}")
            return {"success": False, "error": str(e)}
