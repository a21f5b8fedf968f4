"""Contrat HTTP : enveloppe JSON et correspondance erreurs -> statuts."""


def _create_material(client, name="MAT-FLOUR", stock=10, min_stock=5, unit="kg"):
    r = client.post("/v1/materials", json={"name": name, "unit": unit, "stock": stock, "min_stock": min_stock})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _create_product(client, name, price, category="Kopi", recipe=None):
    r = client.post("/v1/products", json={"name": name, "price": price, "category": category})
    assert r.status_code == 201, r.text
    product = r.json()["data"]
    for material_id, qty in (recipe or {}).items():
        r = client.post(
            f"/v1/products/{product['id']}/materials",
            json={"material_id": material_id, "quantity_per_unit": qty},
        )
        assert r.status_code == 201, r.text
    return product


def test_health(client):
    r = client.get("/v1/health")

    assert r.status_code == 200
    assert r.json() == {"success": True, "data": {"status": "ok", "database": "ok"}}


def test_sale_then_barista_completion(client, cashier):
    """
    GIVEN
    - MAT-FLOUR stock 10 / min 5, Croissant = 1 MAT-FLOUR

    WHEN
    - vente de 3 Croissant, commande barista reprise de la vente, complétion

    THEN
    - la vente ne touche pas au stock
    - la complétion déduit 3, une seule fois
    """
    flour = _create_material(client)
    croissant = _create_product(client, "Croissant", 22000, "Makanan", {flour["id"]: 1})

    r = client.post("/v1/transactions", json={"user_id": cashier.id, "items": [{"product_id": croissant["id"], "quantity": 3}]})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["total"] == 66000.0
    trx_id = body["data"]["id"]

    assert client.get(f"/v1/materials/{flour['id']}").json()["data"]["stock"] == 10.0

    r = client.post("/v1/fulfillment-orders", json={"cashier_id": cashier.id, "transaction_id": trx_id})
    assert r.status_code == 201
    assert r.json()["message"] == "Order sent to barista"
    order = r.json()["data"]
    assert order["status"] == "waiting"
    assert order["items"] == [{"product_id": croissant["id"], "quantity": 3, "notes": None}]

    for _ in range(2):
        r = client.patch(f"/v1/fulfillment-orders/{order['id']}", json={"status": "completed"})
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "completed"

    material = client.get(f"/v1/materials/{flour['id']}").json()["data"]
    assert material["stock"] == 7.0
    assert material["status"] == "Aman"


def test_transaction_totals(client, cashier):
    espresso = _create_product(client, "Espresso", 18000)
    latte = _create_product(client, "Kopi Susu", 25000)

    r = client.post(
        "/v1/transactions",
        json={
            "user_id": cashier.id,
            "items": [
                {"product_id": espresso["id"], "quantity": 2},
                {"product_id": latte["id"], "quantity": 1},
            ],
        },
    )

    data = r.json()["data"]
    assert [l["subtotal"] for l in data["lines"]] == [36000.0, 25000.0]
    assert data["total"] == 61000.0

    listed = client.get("/v1/transactions").json()["data"]
    assert [t["id"] for t in listed] == [data["id"]]


def test_error_envelope_and_status_mapping(client, cashier, inactive_user):
    espresso = _create_product(client, "Espresso", 18000)

    # quantité invalide -> 400 INVALID_INPUT
    r = client.post("/v1/transactions", json={"user_id": cashier.id, "items": [{"product_id": espresso["id"], "quantity": 0}]})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["code"] == "INVALID_INPUT"
    assert r.json()["retryable"] is False

    # produit inconnu -> 404, rien d'enregistré
    r = client.post("/v1/transactions", json={"user_id": cashier.id, "items": [{"product_id": 999, "quantity": 1}]})
    assert r.status_code == 404
    assert r.json()["code"] == "PRODUCT_NOT_FOUND"
    assert client.get("/v1/transactions").json()["data"] == []

    # utilisateur inactif -> 400 USER_INVALID
    r = client.post("/v1/transactions", json={"user_id": inactive_user.id, "items": [{"product_id": espresso["id"], "quantity": 1}]})
    assert r.status_code == 400
    assert r.json()["code"] == "USER_INVALID"

    r = client.get("/v1/transactions/999")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"


def test_fulfillment_status_errors(client, cashier):
    water = _create_product(client, "Air Mineral", 8000, "Non-Kopi")
    r = client.post("/v1/fulfillment-orders", json={"cashier_id": cashier.id, "items": [{"product_id": water["id"], "quantity": 1}]})
    order_id = r.json()["data"]["id"]

    r = client.patch(f"/v1/fulfillment-orders/{order_id}", json={"status": "done"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_STATUS"

    r = client.patch("/v1/fulfillment-orders/999", json={"status": "ready"})
    assert r.status_code == 404

    assert client.patch(f"/v1/fulfillment-orders/{order_id}", json={"status": "completed"}).status_code == 200
    r = client.patch(f"/v1/fulfillment-orders/{order_id}", json={"status": "processing"})
    assert r.status_code == 409
    assert r.json()["code"] == "CONFLICT"

    assert client.delete(f"/v1/fulfillment-orders/{order_id}").status_code == 200
    assert client.get(f"/v1/fulfillment-orders/{order_id}").status_code == 404


def test_procurement_receipt(client, buyer):
    milk = _create_material(client, "Susu Segar", stock=0, min_stock=4, unit="liter")

    assert [m["name"] for m in client.get("/v1/materials/low-stock").json()["data"]] == ["Susu Segar"]

    r = client.post("/v1/procurement-orders", json={"material_id": milk["id"], "user_id": buyer.id, "quantity": 50})
    assert r.status_code == 201
    order = r.json()["data"]
    assert order["status"] == "Pending"

    r = client.patch(f"/v1/procurement-orders/{order['id']}", json={"status": "Diterima", "received_date": "2026-10-03"})
    assert r.status_code == 200
    assert r.json()["data"]["received_date"] == "2026-10-03"

    r = client.patch(f"/v1/procurement-orders/{order['id']}", json={"status": "Diterima"})
    assert r.status_code == 200

    material = client.get(f"/v1/materials/{milk['id']}").json()["data"]
    assert material["stock"] == 50.0
    assert material["status"] == "Aman"
    assert client.get("/v1/materials/low-stock").json()["data"] == []

    r = client.patch(f"/v1/procurement-orders/{order['id']}", json={"status": "Pending"})
    assert r.status_code == 409


def test_material_adjustment_and_delete_conflict(client):
    flour = _create_material(client)
    _create_product(client, "Croissant", 22000, "Makanan", {flour["id"]: 1})

    r = client.post(f"/v1/materials/{flour['id']}/adjustments", json={"delta": -12})
    assert r.status_code == 200
    assert r.json()["data"]["stock"] == 0.0
    assert r.json()["data"]["status"] == "Stok Rendah"

    r = client.delete(f"/v1/materials/{flour['id']}")
    assert r.status_code == 409

    r = client.post("/v1/materials", json={"name": "MAT-FLOUR", "unit": "kg", "min_stock": 1})
    assert r.status_code == 409

    r = client.get("/v1/materials/999")
    assert r.status_code == 404
    assert r.json()["code"] == "MATERIAL_NOT_FOUND"


def test_recipe_endpoints(client):
    coffee = _create_material(client, "Biji Kopi Arabika", stock=5, min_stock=2)
    espresso = _create_product(client, "Espresso", 18000, recipe={coffee["id"]: 0.018})

    lines = client.get(f"/v1/products/{espresso['id']}/materials").json()["data"]
    assert lines == [
        {
            "product_id": espresso["id"],
            "material_id": coffee["id"],
            "material_name": "Biji Kopi Arabika",
            "unit": "kg",
            "quantity_per_unit": 0.018,
        }
    ]

    r = client.put(f"/v1/products/{espresso['id']}/materials/{coffee['id']}", json={"quantity_per_unit": 0.02})
    assert r.json()["data"]["quantity_per_unit"] == 0.02

    r = client.post(f"/v1/products/{espresso['id']}/materials", json={"material_id": coffee["id"], "quantity_per_unit": 1})
    assert r.status_code == 409

    r = client.post(f"/v1/products/{espresso['id']}/materials", json={"material_id": coffee["id"], "quantity_per_unit": 0})
    assert r.status_code == 400

    assert client.delete(f"/v1/products/{espresso['id']}/materials/{coffee['id']}").status_code == 200
    assert client.get(f"/v1/products/{espresso['id']}/materials").json()["data"] == []
    assert client.get("/v1/products/999/materials").status_code == 404


def test_oversized_quantities_are_rejected_with_400(client, cashier):
    """
    GIVEN
    - quantités au-delà des bornes de stockage (2**64)

    THEN
    - 400 INVALID_INPUT non rejouable, rien d'enregistré
    """
    espresso = _create_product(client, "Espresso", 18000)

    r = client.post("/v1/transactions", json={"user_id": cashier.id, "items": [{"product_id": espresso["id"], "quantity": 2**64}]})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"
    assert r.json()["retryable"] is False
    assert client.get("/v1/transactions").json()["data"] == []

    r = client.post("/v1/fulfillment-orders", json={"cashier_id": cashier.id, "items": [{"product_id": espresso["id"], "quantity": 2**64}]})
    assert r.status_code == 400
    assert client.get("/v1/fulfillment-orders").json()["data"] == []


def test_oversized_material_values_are_rejected_with_400(client, buyer):
    flour = _create_material(client)

    r = client.post(f"/v1/materials/{flour['id']}/adjustments", json={"delta": 10**20})
    assert r.status_code == 400

    r = client.post("/v1/procurement-orders", json={"material_id": flour["id"], "user_id": buyer.id, "quantity": 10**20})
    assert r.status_code == 400

    assert client.get(f"/v1/materials/{flour['id']}").json()["data"]["stock"] == 10.0
