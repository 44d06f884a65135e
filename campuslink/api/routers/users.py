from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campuslink.api.deps import get_current_user
from campuslink.data.database import get_db
from campuslink.data.models.user import UserModel
from campuslink.services.user_service import UserService
from campuslink.domain.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    return service.create_user(payload)

@router.get("/me", response_model=UserRead)
def get_me(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    service = UserService(db)
    return service.get_user(user.id)
