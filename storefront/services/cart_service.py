from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import NotFound, InsufficientInventory, InvalidQuantity
from storefront.domain.schemas import CartOut, CartItemOut, format_minor_units
from storefront.repos.cart_repo import CartRepo
from storefront.repos.inventory_repo import InventoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def to_cart_out(cart: CartModel) -> CartOut:
    items = [
        CartItemOut(
            product_id=i.product_id,
            name=i.name,
            quantity=i.quantity,
            unit_price_minor_units=i.unit_price,
        )
        for i in cart.items
    ]
    total = sum(i.unit_price * i.quantity for i in cart.items)
    return CartOut(
        cart_id=cart.id,
        user_id=cart.user_id,
        items=items,
        total_minor_units=total,
        total=format_minor_units(total),
    )


class CartService:
    """
    Use cases for the cart domain.
    commands (add, remove) mutate and persist the cart
    query (view) only reads (and lazily creates the cart)

    Nothing here reserves stock; the authoritative check happens at checkout.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.inventory = InventoryRepo(db)

    #query
    def view_cart(self, user_id: int) -> CartOut:
        cart = self.repo.find_or_create(user_id)
        return to_cart_out(cart)

    #commands
    def add_to_cart(self, user_id: int, product_id: int, quantity: int) -> CartOut:
        if quantity <= 0:
            raise InvalidQuantity(quantity)

        product = self.products.get_product(product_id)
        if not product or not product.active:
            raise NotFound(f"product {product_id} not found")

        # advisory only, stock may still run out before checkout
        available = self.inventory.available(product_id) or 0
        if quantity > available:
            raise InsufficientInventory(product_id, quantity)

        cart = self.repo.find_or_create(user_id)
        existing_item = next((i for i in cart.items if i.product_id == product_id), None)

        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            # name/price snapshot from the first add is kept
            existing_item.quantity += quantity
        else:
            logger.info(f"Adding product {product_id} x {quantity} to cart {cart.id}")
            cart.items.append(
                CartItemModel(
                    product_id=product_id,
                    quantity=quantity,
                    name=product.name,
                    unit_price=product.price,
                )
            )

        cart = self.repo.save(cart)
        return to_cart_out(cart)

    def remove_from_cart(self, user_id: int, product_id: int, quantity: int) -> CartOut:
        if quantity <= 0:
            raise InvalidQuantity(quantity)

        cart = self.repo.find_or_create(user_id)
        item = next((i for i in cart.items if i.product_id == product_id), None)
        if not item:
            raise NotFound("product not in cart")

        if item.quantity > quantity:
            logger.info(f"Decrementing product {product_id} in cart {cart.id} by {quantity}")
            item.quantity -= quantity
        else:
            logger.info(f"Dropping product {product_id} from cart {cart.id}")
            cart.items.remove(item)

        cart = self.repo.save(cart)
        return to_cart_out(cart)
