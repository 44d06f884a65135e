#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from campuslink.data.models.user import UserModel
from campuslink.data.models.merchant import MerchantModel
from campuslink.data.models.product import ProductModel
from campuslink.data.models.cart_item import CartItemModel
from campuslink.data.models.order import OrderModel, OrderItemModel
from campuslink.data.models.verification_code import VerificationCodeModel

__all__ = [
    "UserModel",
    "MerchantModel",
    "ProductModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "VerificationCodeModel",
]
