# campuslink/api/routers/verification.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campuslink.api.deps import get_current_user
from campuslink.data.database import get_db
from campuslink.data.models.user import UserModel
from campuslink.domain.schemas import SendCodeIn, SendCodeOut, VerifyCodeIn, VerifyCodeOut
from campuslink.services.delivery_service import DeliveryDispatcher
from campuslink.services.throttle_service import ThrottleService
from campuslink.services.verification_service import VerificationService

router = APIRouter(prefix="/verification", tags=["verification"])


def get_throttle() -> ThrottleService:
    return ThrottleService()


def get_dispatcher() -> DeliveryDispatcher:
    return DeliveryDispatcher()


@router.post("/send", response_model=SendCodeOut)
def send_code(
    payload: SendCodeIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    throttle: ThrottleService = Depends(get_throttle),
    dispatcher: DeliveryDispatcher = Depends(get_dispatcher),
):
    """
    Generuje kod i probuje wyslac go przez WhatsApp API.
    Bez API (albo przy bledzie) zwraca link click-to-send z gotowa wiadomoscia.
    """
    svc = VerificationService(db, throttle=throttle)
    issued = svc.issue(payload.phone, user)
    ttl_minutes = int(svc.ttl.total_seconds() // 60)

    result = dispatcher.send(issued.phone, issued.code, ttl_minutes)
    return SendCodeOut(
        method=result.method,
        expires_at=issued.expires_at,
        whatsapp_url=result.deep_link,
    )


@router.post("/verify", response_model=VerifyCodeOut)
def verify_code(
    payload: VerifyCodeIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = VerificationService(db).validate(payload.code, user)
    return VerifyCodeOut(verified=result.verified, reason=result.reason)
