# campuslink/services/handoff_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from campuslink.domain.errors import EmptySelection, IncompleteContactInfo, NoContactChannel
from campuslink.domain.phone import whatsapp_link
from campuslink.services.cart_service import MerchantGroup, line_subtotal
from campuslink.utils.settings import CURRENCY
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContactInfo:
    first_name: str
    last_name: str
    location: str
    phone: str

    def is_complete(self) -> bool:
        return all(
            (value or "").strip()
            for value in (self.first_name, self.last_name, self.location, self.phone)
        )


@dataclass(frozen=True)
class HandoffLine:
    item_id: int
    product_name: str
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class Handoff:
    merchant_id: int
    lines: tuple[HandoffLine, ...]
    total: Decimal
    message: str
    deep_link: str


def format_amount(amount: Decimal) -> str:
    """5000 -> '5 000', 1234.5 -> '1 234.50'"""
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        text = f"{int(amount):,}"
    else:
        text = f"{amount:,.2f}"
    return text.replace(",", " ")


class HandoffComposer:
    """
    Builds the WhatsApp order message for one merchant group.

    Wykluczenie linii to tylko roznica zbiorow w momencie skladania wiadomosci,
    koszyk nie jest modyfikowany.
    """

    def __init__(self, currency: str = CURRENCY):
        self.currency = currency

    def select(self, group: MerchantGroup, excluded_ids: Iterable[int] = ()) -> list[HandoffLine]:
        excluded = set(excluded_ids)
        return [
            HandoffLine(
                item_id=line.id,
                product_name=line.product.name,
                quantity=line.quantity,
                subtotal=line_subtotal(line),
            )
            for line in group.lines
            if line.id not in excluded
        ]

    def compose(
        self,
        group: MerchantGroup,
        excluded_ids: Iterable[int],
        contact: ContactInfo,
    ) -> tuple[list[HandoffLine], Decimal, str]:
        selection = self.select(group, excluded_ids)
        if not selection:
            raise EmptySelection()
        if not contact.is_complete():
            raise IncompleteContactInfo()

        total = sum((line.subtotal for line in selection), Decimal("0.00"))

        items_text = "\n".join(
            f"• {line.product_name} (x{line.quantity}) - {format_amount(line.subtotal)} {self.currency}"
            for line in selection
        )
        message = (
            f"Bonjour *{group.business_name}*,\n\n"
            "Je souhaite commander les produits suivants :\n\n"
            f"{items_text}\n\n"
            f"*Total : {format_amount(total)} {self.currency}*\n\n"
            "*Mes informations :*\n"
            f"- Nom : {contact.first_name.strip()} {contact.last_name.strip()}\n"
            f"- Lieu de livraison : {contact.location.strip()}\n"
            f"- Téléphone : {contact.phone.strip()}\n\n"
            "Merci !"
        )
        return selection, total, message

    @staticmethod
    def to_deep_link(channel: str | None, message: str) -> str:
        link = whatsapp_link(channel, message)
        if not link:
            raise NoContactChannel()
        return link

    def handoff(
        self,
        group: MerchantGroup,
        excluded_ids: Iterable[int],
        contact: ContactInfo,
    ) -> Handoff:
        selection, total, message = self.compose(group, excluded_ids, contact)
        deep_link = self.to_deep_link(group.contact_whatsapp, message)

        logger.info(
            f"Handoff composed for merchant {group.merchant_id}: "
            f"{len(selection)}/{len(group.lines)} lines, total {total}"
        )
        return Handoff(
            merchant_id=group.merchant_id,
            lines=tuple(selection),
            total=total,
            message=message,
            deep_link=deep_link,
        )
