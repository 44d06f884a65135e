# campuslink/domain/phone.py
import re
from urllib.parse import quote

from campuslink.domain.errors import InvalidPhone
from campuslink.utils.settings import DEFAULT_COUNTRY_CODE

_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{7,14}$")

# encodeURIComponent nie koduje tych znakow
_URI_SAFE = "-_.!~*'()"

WHATSAPP_LINK_BASE = "https://wa.me"


def sanitize_phone(phone: str | None) -> str:
    if not phone:
        return ""
    return re.sub(r"[^\d+]", "", phone)


def is_valid_phone(phone: str | None) -> bool:
    sanitized = sanitize_phone(phone)
    if _PHONE_PATTERN.match(sanitized):
        return True
    # format lokalny (0...) i miedzynarodowy (00...) sprawdzamy po normalizacji
    if sanitized.startswith("0"):
        return bool(_PHONE_PATTERN.match(normalize_phone(sanitized)))
    return False


def normalize_phone(phone: str | None, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Sprowadza numer do formatu miedzynarodowego bez plusa (np. 221771234567).

    - 00<kod kraju>... -> <kod kraju>...
    - 0... (format lokalny) -> <kod kraju>...
    - numer bez kodu kraju dostaje go z przodu
    """
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""

    if digits.startswith(country_code):
        return digits
    if digits.startswith("00" + country_code):
        return digits[2:]
    if digits.startswith("0"):
        return country_code + digits[1:]
    return country_code + digits


def require_phone(phone: str | None) -> str:
    """Validate and normalize, raising InvalidPhone on malformed input."""
    if not is_valid_phone(phone):
        raise InvalidPhone(f"Invalid phone number: {phone!r}")
    return normalize_phone(phone)


def format_phone_for_display(phone: str | None) -> str:
    formatted = normalize_phone(phone)
    if not formatted:
        return ""

    if formatted.startswith("221") and len(formatted) == 12:
        return (
            f"+221 {formatted[3:5]} {formatted[5:8]} "
            f"{formatted[8:10]} {formatted[10:]}"
        )

    if len(formatted) > 3:
        return f"+{formatted}"
    return formatted


def whatsapp_link(phone: str | None, message: str | None = None) -> str:
    """wa.me deep link with an optional pre-filled, percent-encoded text."""
    destination = normalize_phone(phone)
    if not destination:
        return ""

    url = f"{WHATSAPP_LINK_BASE}/{destination}"
    if message:
        url += "?text=" + quote(message, safe=_URI_SAFE)
    return url
