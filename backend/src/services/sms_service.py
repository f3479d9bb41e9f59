"""
SMS Servisi
netgsm / iletimerkezi / verimor HTTP API'leri üzerinden gönderim
"""
from typing import Optional
import re
import logging

import httpx

from core.config import settings
from models.system_settings import SmsSettings

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    """Türkiye numarasını 90XXXXXXXXXX biçimine getir"""
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) == 10 and not digits.startswith("90"):
        return "90" + digits
    if len(digits) == 11 and digits.startswith("0"):
        return "90" + digits[1:]
    return digits


class SmsService:
    """Sağlayıcıya göre SMS gönderici"""

    def __init__(self, config: SmsSettings, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(url, **kwargs)
        async with httpx.AsyncClient(timeout=settings.SMS_TIMEOUT_SECONDS) as client:
            return await client.post(url, **kwargs)

    async def _send_netgsm(self, to: str, content: str) -> dict:
        response = await self._post(settings.NETGSM_URL, data={
            "usercode": self.config.api_key,
            "password": self.config.api_secret,
            "gsmno": to,
            "message": content,
            "msgheader": self.config.sender_name,
        })
        body = response.text.strip()
        # 00/01/02 ile başlayan cevap başarılı
        if body[:2] in ("00", "01", "02"):
            return {"success": True, "message_id": body, "provider": "netgsm"}
        return {"success": False, "error": f"NetGSM hatası: {body}"}

    async def _send_iletimerkezi(self, to: str, content: str) -> dict:
        response = await self._post(settings.ILETIMERKEZI_URL, json={
            "request": {
                "authentication": {"key": self.config.api_key, "hash": self.config.api_secret},
                "order": {
                    "sender": self.config.sender_name,
                    "sendDateTime": [],
                    "iys": 1,
                    "iysList": "BIREYSEL",
                    "message": {"text": content, "receipents": {"number": [to]}},
                },
            }
        })
        payload = response.json()
        result = payload.get("response") or {}
        if (result.get("status") or {}).get("code") == 200:
            return {"success": True, "message_id": str(result.get("jobId")), "provider": "iletimerkezi"}
        return {"success": False, "error": f"İletiMerkezi hatası: {response.text}"}

    async def _send_verimor(self, to: str, content: str) -> dict:
        response = await self._post(settings.VERIMOR_URL, json={
            "username": self.config.api_key,
            "password": self.config.api_secret,
            "source_addr": self.config.sender_name,
            "messages": [{"msg": content, "dest": to}],
        })
        if response.is_success:
            return {"success": True, "message_id": response.text.strip(), "provider": "verimor"}
        return {"success": False, "error": f"Verimor hatası: {response.text}"}

    async def send_sms(self, to: str, content: str) -> dict:
        """
        SMS gönder.
        Hata fırlatmaz; {success, message_id | error} döner.
        """
        if not self.config.enabled or not self.config.api_key:
            return {"success": False, "error": "SMS ayarları yapılandırılmamış veya devre dışı"}

        phone = normalize_phone(to)
        senders = {
            "netgsm": self._send_netgsm,
            "iletimerkezi": self._send_iletimerkezi,
            "verimor": self._send_verimor,
        }
        try:
            result = await senders[self.config.provider](phone, content)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"SMS gönderilemedi ({phone}): {e}")
            return {"success": False, "error": str(e)}

        if result["success"]:
            logger.info(f"SMS gönderildi: {phone} ({self.config.provider})")
        else:
            logger.warning(f"SMS sağlayıcı hatası: {result['error']}")
        return result
