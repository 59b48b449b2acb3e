from unittest.mock import MagicMock

from storefront.data.models import CartModel
from storefront.domain.errors import StoreFailure
from storefront.repos.cart_repo import CartRepo
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.tasks.cart_cleanup import clear_cart_task


def test_deferred_clear_empties_cart_but_keeps_record(monkeypatch, session_factory, db_session, make_user, make_product, make_cart):
    user = make_user()
    product = make_product()
    cart = make_cart(user, [(product, 2)])
    monkeypatch.setattr("storefront.tasks.cart_cleanup.SessionLocal", session_factory)

    result = clear_cart_task(user.id, cart.version)

    assert result == {"user_id": user.id, "status": "cleared"}
    db_session.expire_all()
    stored = db_session.get(CartModel, cart.id)
    assert stored is not None
    assert stored.items == []
    assert stored.version == 2


def test_deferred_clear_keeps_items_added_after_checkout(
    monkeypatch, session_factory, db_session, make_user, make_product, make_cart, payment_client, lock_service
):
    user = make_user()
    paid = make_product(name="Paid", inventory=5)
    fresh = make_product(name="Fresh", inventory=5)
    make_cart(user, [(paid, 1)])

    queued = MagicMock()
    monkeypatch.setattr("storefront.services.checkout_service.clear_cart_task", queued)
    checkout = CheckoutService(db_session, payment_client=payment_client, lock_service=lock_service)
    checkout.carts.clear = MagicMock(side_effect=StoreFailure("could not clear cart"))
    checkout.checkout(user.id)

    CartService(db_session).add_to_cart(user.id, fresh.id, 2)

    monkeypatch.setattr("storefront.tasks.cart_cleanup.SessionLocal", session_factory)
    result = clear_cart_task(*queued.delay.call_args.args)

    assert result == {"user_id": user.id, "status": "skipped"}
    db_session.expire_all()
    cart = CartService(db_session).view_cart(user.id)
    assert [(i.name, i.quantity) for i in cart.items] == [("Paid", 1), ("Fresh", 2)]


def test_clear_with_stale_version_leaves_cart_alone(db_session, make_user, make_product, make_cart):
    user = make_user()
    cart = make_cart(user, [(make_product(), 1)])
    repo = CartRepo(db_session)

    assert repo.clear(user.id, expected_version=cart.version + 1) is False

    db_session.expire_all()
    stored = db_session.get(CartModel, cart.id)
    assert len(stored.items) == 1
    assert stored.version == 1


def test_clear_without_cart_reports_nothing_cleared(db_session, make_user):
    assert CartRepo(db_session).clear(make_user().id) is False
