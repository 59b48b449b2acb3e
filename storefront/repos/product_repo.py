# storefront/repos/product_repo.py
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self, query: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.active.is_(True))
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(
                or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        return list(self.db.execute(stmt.order_by(ProductModel.id)).scalars().all())
