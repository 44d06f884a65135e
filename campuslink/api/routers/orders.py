# campuslink/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from campuslink.api.deps import get_current_merchant, get_current_user
from campuslink.data.database import get_db
from campuslink.data.models.merchant import MerchantModel
from campuslink.data.models.user import UserModel
from campuslink.domain.order_status import OrderStatus
from campuslink.domain.schemas import OrderCreate, OrderOut, OrderStatsOut, StatusIn, TransitionsOut
from campuslink.repos.user_repo import UserRepo
from campuslink.services.handoff_service import ContactInfo
from campuslink.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    merchant: MerchantModel = Depends(get_current_merchant),
    db: Session = Depends(get_db),
):
    """
    Sprzedawca wprowadza zamówienie po otrzymaniu wiadomości WhatsApp.
    Startuje w statusie pending.
    """
    return get_service(db).create_order(
        merchant,
        ContactInfo(**payload.contact.model_dump()),
        [(i.product_id, i.quantity) for i in payload.items],
        customer_user_id=payload.customer_user_id,
        notes=payload.notes,
    )


@router.get("/", response_model=list[OrderOut])
def list_orders(
    status: str | None = Query(None),
    merchant: MerchantModel = Depends(get_current_merchant),
    db: Session = Depends(get_db),
):
    return get_service(db).list_orders(merchant, status)


@router.get("/stats", response_model=OrderStatsOut)
def merchant_stats(
    merchant: MerchantModel = Depends(get_current_merchant),
    db: Session = Depends(get_db),
):
    return get_service(db).merchant_stats(merchant)


# /mine przed /{order_id}, inaczej "mine" trafia w parametr int
@router.get("/mine", response_model=list[OrderOut])
def my_orders(
    status: str | None = Query(None),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).list_customer_orders(user.id, status)


@router.get("/mine/stats", response_model=OrderStatsOut)
def my_stats(
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).customer_stats(user.id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    merchant = UserRepo(db).get_merchant_for_owner(user.id)
    return get_service(db).get_order(order_id, user.id, merchant)


@router.get("/{order_id}/transitions", response_model=TransitionsOut)
def get_transitions(
    order_id: int,
    merchant: MerchantModel = Depends(get_current_merchant),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    allowed = svc.allowed_transitions(order_id, merchant)
    order = svc.get_order(order_id, merchant.owner_user_id, merchant)
    return TransitionsOut(order_id=order.id, status=OrderStatus(order.status), allowed=allowed)


@router.post("/{order_id}/status", response_model=OrderOut)
def change_status(
    order_id: int,
    payload: StatusIn,
    merchant: MerchantModel = Depends(get_current_merchant),
    db: Session = Depends(get_db),
):
    return get_service(db).transition(order_id, payload.status, merchant)
