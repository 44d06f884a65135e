# campuslink/services/cart_service.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Any, Iterable

from sqlalchemy.orm import Session

from campuslink.data.models.cart_item import CartItemModel
from campuslink.domain.errors import InvalidQuantity, NotFound, OutOfStock, PermissionDenied
from campuslink.repos.cart_repo import CartRepo
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MerchantGroup:
    """Cart lines of a single merchant. Derived, never persisted."""
    merchant_id: int
    business_name: str
    contact_whatsapp: str | None
    lines: list[CartItemModel] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((line_subtotal(line) for line in self.lines), Decimal("0.00"))


def line_subtotal(line: CartItemModel) -> Decimal:
    return Decimal(line.product.price) * line.quantity


def group_lines(lines: Iterable[CartItemModel]) -> Dict[int, MerchantGroup]:
    """
    Grupuje linie koszyka po sprzedawcy.
    Kazda linia trafia do dokladnie jednej grupy, kolejnosc linii zachowana,
    wiec suma subtotali grup == suma calego koszyka.
    """
    groups: Dict[int, MerchantGroup] = {}
    for line in lines:
        merchant = line.product.merchant
        group = groups.get(merchant.id)
        if group is None:
            group = MerchantGroup(
                merchant_id=merchant.id,
                business_name=merchant.business_name,
                contact_whatsapp=merchant.contact_whatsapp,
            )
            groups[merchant.id] = group
        group.lines.append(line)
    return groups


def cart_total(lines: Iterable[CartItemModel]) -> Decimal:
    return sum((line_subtotal(line) for line in lines), Decimal("0.00"))


class CartService:
    """
    Koszyk per user, linie bez wspoldzielenia miedzy userami.
    commands (add, update_quantity, remove) modyfikuja stan
    query (get_cart, group) tylko odczyt
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        lines = self.repo.get_items(user_id)
        return {
            "user_id": user_id,
            "items": [self._line_dict(line) for line in lines],
            "total": cart_total(lines),
        }

    def group(self, user_id: int) -> Dict[int, MerchantGroup]:
        return group_lines(self.repo.get_items(user_id))

    def get_group(self, user_id: int, merchant_id: int) -> MerchantGroup:
        group = self.group(user_id).get(merchant_id)
        if group is None:
            raise NotFound(f"No cart items for merchant {merchant_id}")
        return group

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity()

        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound(f"Product {product_id} not found")
        self._require_stock(product)

        existing = self.repo.get_item_for_product(user_id, product_id)
        if existing:
            new_quantity = self._clamp(existing.quantity + quantity, product.stock_quantity)
            logger.info(
                f"Product {product_id} already in cart of user {user_id}, "
                f"quantity {existing.quantity} -> {new_quantity}"
            )
            existing.quantity = new_quantity
            self.repo.save_item(existing)
        else:
            logger.info(f"Adding product {product_id} to cart of user {user_id}")
            self.repo.save_item(
                CartItemModel(
                    user_id=user_id,
                    product_id=product_id,
                    quantity=self._clamp(quantity, product.stock_quantity),
                )
            )

        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity()

        item = self._owned_item(user_id, item_id)
        self._require_stock(item.product)
        item.quantity = self._clamp(quantity, item.product.stock_quantity)
        self.repo.save_item(item)

        logger.info(f"Cart item {item_id} of user {user_id} set to quantity {item.quantity}")
        return self.get_cart(user_id)

    def remove(self, user_id: int, item_id: int) -> Dict[str, Any]:
        # zamowienia trzymaja snapshoty, usuniecie linii ich nie dotyka
        item = self._owned_item(user_id, item_id)
        self.repo.delete_item(item)

        logger.info(f"Cart item {item_id} removed from cart of user {user_id}")
        return self.get_cart(user_id)

    def _owned_item(self, user_id: int, item_id: int) -> CartItemModel:
        item = self.repo.get_item(item_id)
        if not item:
            raise NotFound(f"Cart item {item_id} not found")
        if item.user_id != user_id:
            raise PermissionDenied("Cart item belongs to another user")
        return item

    @staticmethod
    def _require_stock(product) -> None:
        # stan sledzony i wyczerpany, linii nie da sie dodac ani zmienic
        if product.stock_quantity is not None and product.stock_quantity <= 0:
            raise OutOfStock(f"Product {product.id} out of stock")

    @staticmethod
    def _clamp(quantity: int, stock: int | None) -> int:
        # wywolywane tylko przy stock > 0 albo bez sledzenia stanu
        if stock is None:
            return quantity
        return max(1, min(quantity, stock))

    @staticmethod
    def _line_dict(line: CartItemModel) -> Dict[str, Any]:
        return {
            "id": line.id,
            "product_id": line.product_id,
            "product_name": line.product.name,
            "merchant_id": line.product.merchant_id,
            "quantity": line.quantity,
            "price": line.product.price,
            "subtotal": line_subtotal(line),
        }
