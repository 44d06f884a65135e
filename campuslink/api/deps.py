# campuslink/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from campuslink.data.database import get_db
from campuslink.data.models.merchant import MerchantModel
from campuslink.data.models.user import UserModel
from campuslink.domain.errors import AuthenticationRequired, PermissionDenied
from campuslink.repos.user_repo import UserRepo


def get_current_user(
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
) -> UserModel:
    if x_user_id is None:
        raise AuthenticationRequired("X-User-Id header required")

    user = UserRepo(db).get_user(x_user_id)
    if not user:
        raise AuthenticationRequired("User not authenticated")
    return user


def get_current_merchant(
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MerchantModel:
    merchant = UserRepo(db).get_merchant_for_owner(user.id)
    if not merchant:
        raise PermissionDenied("Merchant account required")
    return merchant
