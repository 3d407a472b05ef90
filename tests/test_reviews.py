import pytest

from storefront.models.order import OrderStatus
from storefront.models.product import Product


@pytest.fixture
def purchased(user, product, make_order):
    """user купил product (заказ завершён)."""
    return make_order(user, status=OrderStatus.done, product=product)


def test_reviews_require_authentication(client):
    assert client.get("/api/reviews").status_code == 401


def test_create_review_for_purchased_product(client, auth, db, user, product, purchased):
    resp = client.post(
        f"/api/products/{product.id}/reviews",
        json={"rating": 4, "review": "Fits well"},
        headers=auth(user),
    )

    assert resp.status_code == 201
    review = resp.json()["data"]["data"]
    assert review["product"] == product.id
    assert review["user"]["id"] == user.id
    assert review["rating"] == 4

    db.expire_all()
    refreshed = db.get(Product, product.id)
    assert refreshed.ratings_quantity == 1
    assert refreshed.ratings_average == 4.0


def test_create_review_with_product_in_body(client, auth, user, product, purchased):
    resp = client.post("/api/reviews", json={"rating": 5, "product": product.id}, headers=auth(user))

    assert resp.status_code == 201


def test_create_review_without_product(client, auth, user):
    resp = client.post("/api/reviews", json={"rating": 5}, headers=auth(user))

    assert resp.status_code == 400


def test_create_review_for_missing_product(client, auth, user):
    resp = client.post("/api/products/77/reviews", json={"rating": 5}, headers=auth(user))

    assert resp.status_code == 404


def test_cannot_review_product_not_purchased(client, auth, user, product, make_order):
    # заказ есть, но не завершён
    make_order(user, status=OrderStatus.processing, product=product)

    resp = client.post(f"/api/products/{product.id}/reviews", json={"rating": 3}, headers=auth(user))

    assert resp.status_code == 400
    assert resp.json()["message"] == "You can only review products you have purchased"


def test_cannot_review_twice(client, auth, user, product, purchased):
    url = f"/api/products/{product.id}/reviews"
    client.post(url, json={"rating": 3}, headers=auth(user))

    resp = client.post(url, json={"rating": 5}, headers=auth(user))

    assert resp.status_code == 400
    assert resp.json()["message"] == "You have already reviewed this product"


def test_rating_bounds(client, auth, user, product, purchased):
    resp = client.post(f"/api/products/{product.id}/reviews", json={"rating": 6}, headers=auth(user))

    assert resp.status_code == 422


def test_list_reviews_by_product(client, auth, db, user, other_user, product, make_order):
    second = Product(name="Wool hat", price=10)
    db.add(second)
    db.commit()
    make_order(user, status=OrderStatus.done, product=product)
    make_order(other_user, status=OrderStatus.done, product=product)
    make_order(user, status=OrderStatus.done, product=second)
    client.post(f"/api/products/{product.id}/reviews", json={"rating": 2}, headers=auth(user))
    client.post(f"/api/products/{product.id}/reviews", json={"rating": 4}, headers=auth(other_user))
    client.post(f"/api/products/{second.id}/reviews", json={"rating": 5}, headers=auth(user))

    nested = client.get(f"/api/products/{product.id}/reviews", params={"sort": "rating"}, headers=auth(user))
    by_user = client.get("/api/reviews", params={"user": user.id}, headers=auth(user))

    assert [r["rating"] for r in nested.json()["data"]["data"]] == [2, 4]
    assert nested.json()["results"] == 2
    assert {r["product"] for r in by_user.json()["data"]["data"]} == {product.id, second.id}


def test_get_review(client, auth, user, product, purchased):
    created = client.post(f"/api/products/{product.id}/reviews", json={"rating": 4}, headers=auth(user))
    review_id = created.json()["data"]["data"]["id"]

    assert client.get(f"/api/reviews/{review_id}", headers=auth(user)).status_code == 200
    assert client.get("/api/reviews/999", headers=auth(user)).status_code == 404


def test_update_and_delete_are_admin_only(client, auth, db, admin, user, product, purchased):
    created = client.post(f"/api/products/{product.id}/reviews", json={"rating": 4}, headers=auth(user))
    review_id = created.json()["data"]["data"]["id"]

    assert client.patch(f"/api/reviews/{review_id}", json={"rating": 1}, headers=auth(user)).status_code == 403
    assert client.delete(f"/api/reviews/{review_id}", headers=auth(user)).status_code == 403

    updated = client.patch(f"/api/reviews/{review_id}", json={"rating": 2}, headers=auth(admin))
    assert updated.json()["data"]["data"]["rating"] == 2
    db.expire_all()
    assert db.get(Product, product.id).ratings_average == 2.0

    assert client.delete(f"/api/reviews/{review_id}", headers=auth(admin)).status_code == 204
    db.expire_all()
    assert db.get(Product, product.id).ratings_quantity == 0
    assert client.get(f"/api/reviews/{review_id}", headers=auth(admin)).status_code == 404
