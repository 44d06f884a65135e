# campuslink/data/seed.py
from decimal import Decimal

from campuslink.data.database import SessionLocal
from campuslink.data.models import UserModel, MerchantModel, ProductModel


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(MerchantModel).first():
            return

        owner = UserModel(id=1, name="Demo Merchant")
        customer = UserModel(id=2, name="Demo Student")
        db.add_all([owner, customer])
        db.flush()

        merchant = MerchantModel(
            owner_user_id=owner.id,
            business_name="Boutique du Campus",
            contact_whatsapp="221771234567",
        )
        db.add(merchant)
        db.flush()

        db.add_all([
            ProductModel(merchant_id=merchant.id, name="Cahier A4", price=Decimal("1500"), stock_quantity=40),
            ProductModel(merchant_id=merchant.id, name="Stylo bleu", price=Decimal("250"), stock_quantity=None),
            ProductModel(merchant_id=merchant.id, name="Clé USB 32 Go", price=Decimal("5000"), stock_quantity=5),
        ])
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    import campuslink.main  # noqa: F401  tworzy tabele
    seed()
