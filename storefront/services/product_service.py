from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound
from storefront.domain.schemas import ProductCreate, ProductOut, format_minor_units
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def to_product_out(product: ProductModel) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        price_minor_units=product.price,
        price=format_minor_units(product.price),
        inventory=product.inventory,
        active=product.active,
    )


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def create_product(self, payload: ProductCreate) -> ProductOut:
        product = ProductModel(
            name=payload.name,
            description=payload.description,
            price=payload.price_minor_units,
            inventory=payload.inventory,
            active=payload.active,
        )
        created = self.repo.create_product(product)
        logger.info(f"Product {created.id} created ({created.name}, inventory {created.inventory})")
        return to_product_out(created)

    def list_products(self, query: str | None = None) -> list[ProductOut]:
        return [to_product_out(p) for p in self.repo.list_products(query)]

    def get_product(self, product_id: int) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product or not product.active:
            raise NotFound(f"product {product_id} not found")
        return to_product_out(product)
