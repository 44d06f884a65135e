from sqlalchemy import Column, Integer, ForeignKey, String
from sqlalchemy.orm import relationship

from campuslink.data.database import Base


class MerchantModel(Base):
    __tablename__ = "merchants"

    id = Column(Integer, primary_key=True)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    business_name = Column(String, nullable=False)
    # numer na ktory idzie wiadomosc z zamowieniem
    contact_whatsapp = Column(String(20), nullable=True)

    products = relationship("ProductModel", back_populates="merchant")
