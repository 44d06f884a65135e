# campuslink/repos/cart_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from campuslink.data.models.cart_item import CartItemModel
from campuslink.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_items(self, user_id: int) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
        )
        return list(self.db.execute(stmt).unique().scalars().all())

    def get_item(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def get_item_for_product(self, user_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.user_id == user_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def save_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item: CartItemModel):
        self.db.delete(item)
        self.db.commit()
