# campuslink/services/whatsapp_client.py
import requests
from requests import RequestException

from campuslink.domain.errors import ExternalUnavailable
from campuslink.utils.retry import http_retry
from campuslink.utils.settings import (
    WHATSAPP_API_URL,
    WHATSAPP_PHONE_ID,
    WHATSAPP_TOKEN,
    WHATSAPP_TIMEOUT_SECONDS,
)
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


class WhatsAppClient:
    """Thin client for the WhatsApp Business Cloud API (text messages only)."""

    def __init__(
        self,
        token: str | None = None,
        phone_id: str | None = None,
        base_url: str | None = None,
        timeout: int = WHATSAPP_TIMEOUT_SECONDS,
    ):
        self.token = WHATSAPP_TOKEN if token is None else token
        self.phone_id = WHATSAPP_PHONE_ID if phone_id is None else phone_id
        self.base_url = (base_url or WHATSAPP_API_URL).rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.token and self.phone_id)

    @http_retry()
    def _post(self, url: str, payload: dict) -> dict:
        resp = requests.post(
            url,
            json=payload,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def send_text(self, to: str, body: str) -> dict:
        if not self.configured:
            raise ExternalUnavailable("WhatsApp API is not configured")

        url = f"{self.base_url}/{self.phone_id}/messages"
        logger.info(f"WhatsAppClient POST {url}")

        try:
            return self._post(
                url,
                {
                    "messaging_product": "whatsapp",
                    "to": to,
                    "type": "text",
                    "text": {"body": body},
                },
            )
        except RequestException as e:
            logger.warning(f"WhatsApp API error: {e}")
            raise ExternalUnavailable(str(e)) from e
