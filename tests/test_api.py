"""HTTP-level tests: envelopes, identity headers and error mapping."""

import uuid


def add(client, headers, product_id, quantity=1):
    return client.post("/cart", json={"productId": product_id, "quantity": quantity}, headers=headers)


ADDRESS = {
    "firstName": "Aiko",
    "lastName": "Tanaka",
    "email": "aiko@example.com",
    "phone": "+48 600 100 200",
    "street": "Kwiatowa 1",
    "city": "Warszawa",
    "zipCode": "00-001",
    "country": "Poland",
}


class TestProducts:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"] == {"status": "ok"}

    def test_list(self, client):
        body = client.get("/products").json()
        assert body["success"] is True
        assert {p["name"] for p in body["data"]} == {"Tonkotsu Ramen", "Gyoza", "Sushi Platter"}

    def test_filter_by_category(self, client):
        body = client.get("/products", params={"category": "starters"}).json()
        assert [p["name"] for p in body["data"]] == ["Gyoza"]

    def test_get_by_legacy_and_canonical_id(self, client, products):
        by_legacy = client.get("/products/1").json()["data"]
        by_uuid = client.get(f"/products/{products['ramen'].id}").json()["data"]

        assert by_legacy == by_uuid
        assert by_legacy["legacyId"] == 1
        assert by_legacy["price"] == 10.0

    def test_unknown_product(self, client):
        response = client.get(f"/products/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found"}

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_wrong_method_uses_envelope(self, client, user_headers):
        response = client.patch("/cart", headers=user_headers)
        assert response.status_code == 405
        assert response.json() == {"success": False, "message": "Method Not Allowed"}


class TestCart:
    def test_requires_identity(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_empty_cart(self, client, user_headers):
        body = client.get("/cart", headers=user_headers).json()
        assert body["success"] is True
        assert body["data"]["items"] == []
        assert body["data"]["subtotal"] == 0

    def test_add_by_legacy_id(self, client, user_headers):
        response = add(client, user_headers, 1, 2)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Item added to cart"
        line = body["data"]["items"][0]
        assert line["name"] == "Tonkotsu Ramen"
        assert line["quantity"] == 2
        assert line["lineTotal"] == 20.0
        assert body["data"]["subtotal"] == 20.0
        assert body["data"]["itemCount"] == 2

    def test_add_by_uuid_merges_with_legacy(self, client, user_headers, products):
        add(client, user_headers, "2")
        body = add(client, user_headers, str(products["gyoza"].id)).json()

        assert len(body["data"]["items"]) == 1
        assert body["data"]["items"][0]["quantity"] == 2

    def test_add_unknown_product(self, client, user_headers):
        response = add(client, user_headers, 999)
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_add_zero_quantity(self, client, user_headers):
        response = add(client, user_headers, 1, 0)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Quantity must be at least 1"}

    def test_add_huge_quantity(self, client, user_headers):
        response = add(client, user_headers, 1, 2**31)
        assert response.status_code == 400
        assert response.json()["message"].startswith("Quantity cannot exceed")

    def test_update_quantity(self, client, user_headers):
        cart = add(client, user_headers, 1).json()["data"]
        line_id = cart["items"][0]["id"]

        response = client.put(f"/cart/{line_id}", json={"quantity": 4}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["data"]["items"][0]["quantity"] == 4

    def test_update_with_stale_version(self, client, user_headers):
        cart = add(client, user_headers, 1).json()["data"]
        line_id = cart["items"][0]["id"]
        client.put(f"/cart/{line_id}", json={"quantity": 2, "version": cart["version"]}, headers=user_headers)

        response = client.put(
            f"/cart/{line_id}", json={"quantity": 3, "version": cart["version"]}, headers=user_headers
        )
        assert response.status_code == 409
        assert response.json()["success"] is False

    def test_update_missing_line(self, client, user_headers):
        add(client, user_headers, 1)
        response = client.put("/cart/9999", json={"quantity": 2}, headers=user_headers)
        assert response.status_code == 404

    def test_remove_and_clear(self, client, user_headers):
        add(client, user_headers, 1)
        cart = add(client, user_headers, 2).json()["data"]

        removed = client.delete(f"/cart/{cart['items'][0]['id']}", headers=user_headers).json()
        assert removed["message"] == "Item removed from cart"
        assert [i["name"] for i in removed["data"]["items"]] == ["Gyoza"]

        cleared = client.delete("/cart", headers=user_headers).json()
        assert cleared["message"] == "Cart cleared"
        assert cleared["data"]["items"] == []

    def test_carts_are_per_user(self, client, user_headers):
        add(client, user_headers, 1)
        other = client.get("/cart", headers={"X-User-Id": "user-2"}).json()
        assert other["data"]["items"] == []


class TestCoupons:
    def test_validate(self, client):
        response = client.post("/coupons/validate", json={"code": "save20", "subtotal": 50})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Coupon is valid"
        assert body["data"]["discount"] == 10.0
        assert body["data"]["coupon"]["code"] == "SAVE20"
        assert body["data"]["coupon"]["discountType"] == "percentage"

    def test_validate_below_minimum(self, client):
        response = client.post("/coupons/validate", json={"code": "FLAT50", "subtotal": 80})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_validate_unknown_code(self, client):
        response = client.post("/coupons/validate", json={"code": "NOPE", "subtotal": 80})
        assert response.status_code == 404
        assert response.json()["message"] == "Invalid coupon code"

    def test_validate_expired(self, client):
        response = client.post("/coupons/validate", json={"code": "OLD10", "subtotal": 80})
        assert response.json() == {"success": False, "message": "This coupon has expired"}

    def test_validate_sub_cent_subtotal(self, client):
        response = client.post("/coupons/validate", json={"code": "SAVE20", "subtotal": "49.995"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_validation_error_uses_envelope(self, client):
        response = client.post("/coupons/validate", json={"code": "SAVE20"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "subtotal" in body["message"]

    def test_available(self, client):
        body = client.get("/coupons").json()
        assert [c["code"] for c in body["data"]] == ["FLAT50", "SAVE20"]

    def test_record_usage(self, client, user_headers):
        response = client.post("/coupons/SAVE20/use", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["data"]["usedCount"] == 1

    def test_record_usage_at_limit(self, client, user_headers):
        response = client.post("/coupons/LASTONE/use", headers=user_headers)
        assert response.status_code == 400

    def test_admin_listing_requires_admin(self, client, user_headers, admin_headers):
        assert client.get("/coupons/all", headers=user_headers).status_code == 403
        body = client.get("/coupons/all", headers=admin_headers).json()
        assert len(body["data"]) == 6

    def test_admin_create_update_delete(self, client, admin_headers):
        created = client.post(
            "/coupons",
            json={
                "code": "summer30",
                "discountType": "percentage",
                "discountValue": 30,
                "maxDiscount": 25,
                "validUntil": "2099-01-01T00:00:00Z",
            },
            headers=admin_headers,
        )
        assert created.status_code == 201
        coupon = created.json()["data"]
        assert coupon["code"] == "SUMMER30"

        updated = client.put(f"/coupons/{coupon['id']}", json={"isActive": False}, headers=admin_headers)
        assert updated.json()["data"]["isActive"] is False

        deleted = client.delete(f"/coupons/{coupon['id']}", headers=admin_headers)
        assert deleted.json() == {"success": True, "message": "Coupon deleted successfully", "data": None}

    def test_create_duplicate(self, client, admin_headers):
        response = client.post(
            "/coupons",
            json={"code": "SAVE20", "discountValue": 5, "validUntil": "2099-01-01T00:00:00Z"},
            headers=admin_headers,
        )
        assert response.status_code == 409


class TestOrders:
    def test_checkout_flow(self, client, user_headers, notifications):
        add(client, user_headers, 1, 5)

        response = client.post(
            "/orders",
            json={"address": ADDRESS, "paymentMethod": "card", "couponCode": "SAVE20"},
            headers=user_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order created successfully"
        order = body["data"]
        assert order["status"] == "pending"
        assert order["subtotal"] == 50.0
        assert order["deliveryFee"] == 4.99
        assert order["discount"] == 10.0
        assert order["total"] == 44.99
        assert order["address"]["zipCode"] == "00-001"
        assert notifications.sent

        cart = client.get("/cart", headers=user_headers).json()["data"]
        assert cart["items"] == []

        orders = client.get("/orders", headers=user_headers).json()["data"]
        assert [o["orderNumber"] for o in orders] == [order["orderNumber"]]

        coupons = client.get("/coupons/all", headers={**user_headers, "X-User-Role": "admin"}).json()["data"]
        assert next(c for c in coupons if c["code"] == "SAVE20")["usedCount"] == 1

    def test_checkout_empty_cart(self, client, user_headers):
        response = client.post("/orders", json={"address": ADDRESS}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"

    def test_checkout_missing_address_field(self, client, user_headers):
        add(client, user_headers, 1)
        address = {k: v for k, v in ADDRESS.items() if k != "city"}

        response = client.post("/orders", json={"address": address}, headers=user_headers)

        assert response.status_code == 400
        assert "city" in response.json()["message"]

    def test_checkout_with_stale_totals(self, client, user_headers):
        add(client, user_headers, 1, 2)
        response = client.post(
            "/orders",
            json={"address": ADDRESS, "subtotal": 10, "deliveryFee": 4.99, "discount": 0},
            headers=user_headers,
        )
        assert response.status_code == 409

    def test_foreign_order_not_visible(self, client, user_headers):
        add(client, user_headers, 1)
        order = client.post("/orders", json={"address": ADDRESS}, headers=user_headers).json()["data"]

        response = client.get(f"/orders/{order['id']}", headers={"X-User-Id": "user-2"})
        assert response.status_code == 404

    def test_status_update_requires_admin(self, client, user_headers, admin_headers):
        add(client, user_headers, 1)
        order = client.post("/orders", json={"address": ADDRESS}, headers=user_headers).json()["data"]

        forbidden = client.put(f"/orders/{order['id']}/status", json={"status": "processing"}, headers=user_headers)
        assert forbidden.status_code == 403

        ok = client.put(f"/orders/{order['id']}/status", json={"status": "processing"}, headers=admin_headers)
        assert ok.status_code == 200
        assert ok.json()["data"]["status"] == "processing"

        skipped = client.put(f"/orders/{order['id']}/status", json={"status": "delivered"}, headers=admin_headers)
        assert skipped.status_code == 400
