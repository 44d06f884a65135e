# campuslink/services/delivery_service.py
from dataclasses import dataclass

from campuslink.domain.errors import ExternalUnavailable
from campuslink.domain.phone import normalize_phone, whatsapp_link
from campuslink.services.whatsapp_client import WhatsAppClient
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)

METHOD_API = "api"
METHOD_CLICK_TO_SEND = "click_to_send"


def verification_message(code: str, ttl_minutes: int = 15) -> str:
    return (
        "🔐 *SenCampusLink - Code de vérification*\n\n"
        f"Votre code de vérification est: *{code}*\n\n"
        f"Ce code expire dans {ttl_minutes} minutes.\n\n"
        "⚠️ Ne partagez jamais ce code avec personne."
    )


@dataclass(frozen=True)
class DeliveryResult:
    method: str
    deep_link: str | None = None


class DeliveryDispatcher:
    """
    Picks push delivery through the WhatsApp API, falling back to click-to-send.

    Security note: in the click-to-send path the code is handed to the user
    inside the deep link before anything is sent, so completing verification
    proves nothing about owning the phone. Only the api path proves possession.
    """

    def __init__(self, client: WhatsAppClient | None = None):
        self.client = client or WhatsAppClient()

    def send(self, phone: str, code: str, ttl_minutes: int = 15) -> DeliveryResult:
        destination = normalize_phone(phone)
        message = verification_message(code, ttl_minutes)

        if self.client.configured:
            try:
                self.client.send_text(destination, message)
                logger.info(f"Verification code pushed to {destination} via WhatsApp API")
                return DeliveryResult(method=METHOD_API)
            except ExternalUnavailable as e:
                # jedyny celowo cichy fallback
                logger.warning(f"Push delivery failed, falling back to click-to-send: {e}")
        else:
            logger.info("WhatsApp API not configured, using click-to-send")

        return DeliveryResult(
            method=METHOD_CLICK_TO_SEND,
            deep_link=whatsapp_link(destination, message),
        )
