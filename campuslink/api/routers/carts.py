#campuslink/api/routers/carts.py
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campuslink.api.deps import get_current_user
from campuslink.data.database import get_db
from campuslink.data.models.user import UserModel
from campuslink.domain.schemas import (
    CartOut,
    HandoffIn,
    HandoffOut,
    ItemIn,
    MerchantGroupOut,
    QuantityIn,
)
from campuslink.services.cart_service import CartService
from campuslink.services.handoff_service import ContactInfo, HandoffComposer

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user.id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).add_product(user.id, payload.product_id, payload.quantity)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: QuantityIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).update_quantity(user.id, item_id, payload.quantity)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).remove(user.id, item_id)


@router.get("/groups", response_model=list[MerchantGroupOut])
def get_groups(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    groups = get_service(db).group(user.id)
    return [
        MerchantGroupOut(
            merchant_id=g.merchant_id,
            business_name=g.business_name,
            has_contact_channel=bool(g.contact_whatsapp),
            item_ids=[line.id for line in g.lines],
            subtotal=g.subtotal,
        )
        for g in groups.values()
    ]


@router.post("/groups/{merchant_id}/handoff", response_model=HandoffOut)
def handoff(
    merchant_id: int,
    payload: HandoffIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Sklada wiadomosc WhatsApp dla jednego sprzedawcy.
    Koszyk zostaje bez zmian, wyslanie linku jest juz poza systemem.
    """
    group = get_service(db).get_group(user.id, merchant_id)
    result = HandoffComposer().handoff(
        group,
        payload.excluded_line_ids,
        ContactInfo(**payload.contact.model_dump()),
    )
    return HandoffOut(
        merchant_id=result.merchant_id,
        lines=[asdict(line) for line in result.lines],
        line_count=len(result.lines),
        total=result.total,
        message=result.message,
        deep_link=result.deep_link,
    )
