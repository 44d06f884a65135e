from sqlalchemy import select
from sqlalchemy.orm import Session
from campuslink.data.models.user import UserModel
from campuslink.data.models.merchant import MerchantModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_merchant_for_owner(self, user_id: int) -> MerchantModel | None:
        stmt = select(MerchantModel).where(MerchantModel.owner_user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def mark_phone_verified(self, user_id: int, phone: str):
        user = self.get_user(user_id)
        if user:
            user.phone = phone
            user.phone_verified = True
