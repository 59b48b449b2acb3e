from storefront.domain.errors import PaymentGatewayFailure, StoreFailure


def test_cart_requires_token(client):
    assert client.get("/cart").status_code == 401
    assert client.get("/cart", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_add_view_remove(client, make_user, make_product, auth_headers):
    user = make_user()
    product = make_product(name="Keyboard", price=1999, inventory=10)
    headers = auth_headers(user)

    added = client.post("/cart/items", json={"product_id": product.id, "quantity": 3}, headers=headers)
    assert added.status_code == 200
    assert added.json()["total_minor_units"] == 5997

    viewed = client.get("/cart", headers=headers).json()
    assert viewed["items"] == [
        {"product_id": product.id, "name": "Keyboard", "quantity": 3, "unit_price_minor_units": 1999}
    ]
    assert viewed["total"] == "59.97"

    reduced = client.delete(f"/cart/items/{product.id}", params={"quantity": 1}, headers=headers)
    assert reduced.json()["items"][0]["quantity"] == 2

    emptied = client.delete(f"/cart/items/{product.id}", params={"quantity": 5}, headers=headers)
    assert emptied.json()["items"] == []


def test_add_errors_map_to_client_statuses(client, make_user, make_product, auth_headers):
    headers = auth_headers(make_user())
    product = make_product(inventory=1)

    assert client.post("/cart/items", json={"product_id": 999, "quantity": 1}, headers=headers).status_code == 404
    assert client.post("/cart/items", json={"product_id": product.id, "quantity": 2}, headers=headers).status_code == 400
    assert client.post("/cart/items", json={"product_id": product.id, "quantity": 0}, headers=headers).status_code == 422


def test_remove_missing_line_is_not_found(client, make_user, make_product, auth_headers):
    headers = auth_headers(make_user())
    product = make_product()

    response = client.delete(f"/cart/items/{product.id}", params={"quantity": 1}, headers=headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "product not in cart"


def test_users_only_see_their_own_cart(client, make_user, make_product, auth_headers):
    alice = make_user(username="alice")
    bob = make_user(username="bob")
    product = make_product(inventory=10)

    client.post("/cart/items", json={"product_id": product.id, "quantity": 1}, headers=auth_headers(alice))

    assert client.get("/cart", headers=auth_headers(bob)).json()["items"] == []


def test_checkout_end_to_end(client, make_user, make_product, auth_headers, payment_client, inventory_of):
    user = make_user()
    product = make_product(price=1000, inventory=5)
    headers = auth_headers(user)
    client.post("/cart/items", json={"product_id": product.id, "quantity": 3}, headers=headers)

    response = client.post("/checkout", headers=headers)

    assert response.status_code == 200
    assert response.json() == {
        "message": "Checkout successful. Payment initiated.",
        "total_paid_minor_units": 3000,
        "payment_intent_id": "pi_test_123",
        "client_secret": "pi_test_123_secret_abc",
    }
    assert inventory_of(product.id) == 2
    payment_client.create_intent.assert_called_once()
    assert payment_client.create_intent.call_args.args[0] == 3000
    assert client.get("/cart", headers=headers).json()["items"] == []


def test_checkout_insufficient_stock(client, make_user, make_product, make_cart, auth_headers, payment_client, inventory_of):
    user = make_user()
    product = make_product(price=1000, inventory=2)
    make_cart(user, [(product, 3)])

    response = client.post("/checkout", headers=auth_headers(user))

    assert response.status_code == 400
    payment_client.create_intent.assert_not_called()
    assert inventory_of(product.id) == 2
    assert client.get("/cart", headers=auth_headers(user)).json()["items"][0]["quantity"] == 3


def test_checkout_empty_cart(client, make_user, auth_headers, payment_client):
    user = make_user()
    headers = auth_headers(user)
    client.get("/cart", headers=headers)

    response = client.post("/checkout", headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "cannot checkout empty cart"
    payment_client.create_intent.assert_not_called()


def test_checkout_without_cart_is_not_found(client, make_user, auth_headers):
    response = client.post("/checkout", headers=auth_headers(make_user()))

    assert response.status_code == 404


def test_checkout_in_progress_is_conflict(client, make_user, make_product, make_cart, auth_headers, lock_service):
    user = make_user()
    make_cart(user, [(make_product(), 1)])
    lock_service.acquire_checkout_lock.return_value = False

    assert client.post("/checkout", headers=auth_headers(user)).status_code == 409


def test_gateway_failure_is_generic_and_restores_stock(client, make_user, make_product, make_cart, auth_headers, payment_client, inventory_of):
    user = make_user()
    product = make_product(inventory=5)
    make_cart(user, [(product, 2)])
    payment_client.create_intent.side_effect = PaymentGatewayFailure("stripe said: card_declined for cus_123")

    response = client.post("/checkout", headers=auth_headers(user))

    assert response.status_code == 502
    assert "cus_123" not in response.text
    assert inventory_of(product.id) == 5


def test_store_failure_is_generic(client, make_user, auth_headers, monkeypatch):
    def broken(self, user_id):
        raise StoreFailure("could not create cart: connection to 10.0.0.5 refused")

    monkeypatch.setattr("storefront.repos.cart_repo.CartRepo.find_or_create", broken)

    response = client.get("/cart", headers=auth_headers(make_user()))

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error."}
