from sqlalchemy import Column, Integer, ForeignKey, String, DateTime

from campuslink.data.database import Base


class VerificationCodeModel(Base):
    __tablename__ = "verification_codes"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    code = Column(String(6), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)
