# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base class for every error raised by the storefront use cases."""


# client-facing: the request itself cannot be satisfied


class NotFound(StorefrontError):
    pass


class InsufficientInventory(StorefrontError):
    def __init__(self, product_id: int, requested: int):
        self.product_id = product_id
        self.requested = requested
        super().__init__(f"insufficient product inventory for product {product_id}")


class CartEmpty(StorefrontError):
    def __init__(self):
        super().__init__("cannot checkout empty cart")


class InvalidQuantity(StorefrontError):
    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__("quantity must be greater than 0")


class InvalidCredentials(StorefrontError):
    def __init__(self, message: str = "invalid username or password"):
        super().__init__(message)


class UsernameTaken(StorefrontError):
    def __init__(self, username: str):
        self.username = username
        super().__init__("username already taken")


class CheckoutInProgress(StorefrontError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("a checkout is already in progress for this user")


# server faults: detail is logged, never returned to the caller


class PaymentGatewayFailure(StorefrontError):
    pass


class StoreFailure(StorefrontError):
    pass
