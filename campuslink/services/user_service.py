from sqlalchemy.orm import Session
from campuslink.data.models.user import UserModel
from campuslink.domain.errors import NotFound
from campuslink.domain.phone import format_phone_for_display
from campuslink.repos.user_repo import UserRepo
from campuslink.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return self._read(existing)

        user = UserModel(id=payload.id, name=payload.name, phone_verified=False)
        created = self.repo.create_user(user)
        return self._read(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return self._read(user)

    def _read(self, user: UserModel) -> UserRead:
        merchant = self.repo.get_merchant_for_owner(user.id)
        return UserRead(
            id=user.id,
            name=user.name,
            phone=format_phone_for_display(user.phone) or None,
            phone_verified=bool(user.phone_verified),
            merchant_id=merchant.id if merchant else None,
        )
