#storefront/data/models/product.py
from sqlalchemy import Column, Integer, String, Text, Boolean, BigInteger, CheckConstraint

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # minor currency units (cents)
    price = Column(BigInteger, nullable=False)
    inventory = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)

    # last line of defence; the app only ever decrements through a conditional update
    __table_args__ = (
        CheckConstraint("inventory >= 0", name="ck_products_inventory_non_negative"),
    )
