from sqlalchemy import Boolean, Column, Integer, String
from campuslink.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    phone = Column(String(20), nullable=True)
    phone_verified = Column(Boolean, nullable=False, default=False)
