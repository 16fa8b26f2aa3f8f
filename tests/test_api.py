"""End-to-end tests through the FastAPI routes."""

from app.inventory.errors import UpstreamUnavailable


def add(client, **overrides):
    body = {"name": "Cement", "sku": "cem01", "quantity": 50, "price": 300, "reorder_level": 10}
    body.update(overrides)
    return client.post("/api/products", json=body)


def test_health(client):
    assert client.get("/health").json()["status"] == "OK"
    assert client.get("/").json()["ok"] is True


class TestProducts:
    def test_add_and_list(self, client):
        response = add(client)
        assert response.status_code == 201
        assert response.json()["product"]["sku"] == "CEM01"

        listed = client.get("/api/products").json()
        assert [p["sku"] for p in listed] == ["CEM01"]
        assert listed[0]["reorder_level"] == 10
        assert listed[0]["last_sold_at"] is None

    def test_default_reorder_level(self, client):
        response = client.post("/api/products", json={"name": "Sand", "sku": "s1", "quantity": 1, "price": 2})
        assert response.json()["product"]["reorder_level"] == 10

    def test_duplicate_sku(self, client):
        add(client)
        response = add(client, sku="CEM01")
        assert response.status_code == 409
        assert response.json() == {"error": "SKU already exists", "code": "DUPLICATE_SKU", "sku": "CEM01"}

    def test_validation_error_is_structured(self, client):
        response = add(client, quantity=-1)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert response.json()["field"] == "quantity"

    def test_non_finite_price_rejected(self, client):
        body = '{"name": "Cement", "sku": "cem01", "quantity": 5, "price": 1e309}'
        response = client.post("/api/products", content=body, headers={"content-type": "application/json"})

        assert response.status_code == 400
        assert response.json()["field"] == "price"
        assert client.get("/api/dashboard/stats").json()["total_value"] == 0

    def test_update_quantity(self, client):
        product_id = add(client).json()["product"]["id"]
        response = client.put(f"/api/products/{product_id}/quantity", json={"quantity": 7})
        assert response.status_code == 200
        assert response.json()["product"]["quantity"] == 7

    def test_update_quantity_unknown(self, client):
        response = client.put("/api/products/999/quantity", json={"quantity": 7})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_delete(self, client):
        product_id = add(client).json()["product"]["id"]
        assert client.delete(f"/api/products/{product_id}").json()["product_id"] == product_id
        assert client.get("/api/products").json() == []
        assert client.delete(f"/api/products/{product_id}").status_code == 404

    def test_categories(self, client):
        add(client, sku="LOW", quantity=3)
        add(client, sku="OUT", quantity=0)
        add(client, sku="OK", quantity=80)

        assert [p["sku"] for p in client.get("/api/products/low-stock").json()] == ["LOW"]
        assert [p["sku"] for p in client.get("/api/products/category/out-of-stock").json()] == ["OUT"]
        # never sold with stock on hand
        assert {p["sku"] for p in client.get("/api/products/dead-stock").json()} == {"LOW", "OK"}
        assert client.get("/api/products/category/bogus").status_code == 400

    def test_search(self, client):
        add(client, name="Portland Cement", sku="CEM01", quantity=40)
        add(client, name="White Cement", sku="CEM02", quantity=3)
        add(client, name="Sand", sku="SND01", quantity=90)

        response = client.get("/api/products/search", params={"query": "cement", "sortBy": "quantity-asc"})
        assert [p["sku"] for p in response.json()] == ["CEM02", "CEM01"]

        response = client.get("/api/products/search", params={"status": "low-stock"})
        assert [p["sku"] for p in response.json()] == ["CEM02"]

        assert client.get("/api/products/search", params={"sortBy": "random"}).status_code == 400


class TestSales:
    def test_record_sale(self, client):
        product_id = add(client, quantity=5).json()["product"]["id"]

        response = client.post("/api/sales", json={"product_id": product_id, "quantity": 2, "price": 280})

        assert response.status_code == 200
        data = response.json()
        assert data["sale"]["price"] == 280
        assert data["product"]["quantity"] == 3
        assert data["product"]["last_sold_at"] is not None

    def test_insufficient_stock(self, client):
        product_id = add(client, quantity=5).json()["product"]["id"]

        response = client.post("/api/sales", json={"product_id": product_id, "quantity": 10})

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_STOCK"
        assert response.json()["available"] == 5
        assert client.get(f"/api/products/{product_id}").json()["quantity"] == 5

    def test_non_finite_sale_price_rejected(self, client):
        product_id = add(client, quantity=5).json()["product"]["id"]
        body = '{"product_id": ' + str(product_id) + ', "quantity": 1, "price": 1e309}'

        response = client.post("/api/sales", content=body, headers={"content-type": "application/json"})

        assert response.status_code == 400
        assert response.json()["field"] == "price"
        assert client.get("/api/sales/summary").json()["total_revenue"] == 0

    def test_unknown_product(self, client):
        response = client.post("/api/sales", json={"product_id": 31337, "quantity": 1})
        assert response.status_code == 404

    def test_history_and_summary(self, client):
        product_id = add(client, price=100).json()["product"]["id"]
        client.post("/api/sales", json={"product_id": product_id, "quantity": 2})
        client.post("/api/sales", json={"product_id": product_id, "quantity": 3})

        history = client.get("/api/sales/history", params={"days": 30}).json()
        assert [h["quantity"] for h in history] == [3, 2]
        assert history[0]["product_sku"] == "CEM01"

        summary = client.get("/api/sales/summary", params={"days": 30}).json()
        assert summary["total_revenue"] == 500
        assert summary["total_units"] == 5
        assert summary["total_sales"] == 2
        assert summary["average_order_value"] == 250
        assert summary["top_products"][0]["sku"] == "CEM01"

    def test_summary_rejects_bad_window(self, client):
        assert client.get("/api/sales/summary", params={"days": 0}).status_code == 422

    def test_export_csv(self, client):
        product_id = add(client, price=100).json()["product"]["id"]
        client.post("/api/sales", json={"product_id": product_id, "quantity": 2})

        response = client.get("/api/sales/export", params={"days": 7})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("id,product_id,product_name,product_sku,quantity,price,total")
        assert len(lines) == 2


class TestDashboard:
    def test_stats(self, client):
        add(client, sku="A", quantity=0, price=10)
        add(client, sku="B", quantity=4, price=10)

        stats = client.get("/api/dashboard/stats").json()

        assert stats == {
            "total_products": 2,
            "low_stock_count": 1,
            "dead_stock_count": 1,
            "out_of_stock_count": 1,
            "total_value": 40.0,
        }

    def test_alerts_critical_first(self, client):
        add(client, sku="LOW", quantity=3)
        out_id = add(client, sku="OUT", quantity=0).json()["product"]["id"]

        alerts = client.get("/api/alerts").json()

        assert alerts[0]["id"] == f"{out_id}-outofstock"
        assert alerts[0]["type"] == "critical"
        assert all(a["type"] == "warning" for a in alerts[1:])
        assert all(a["acknowledged"] is False for a in alerts)

    def test_acknowledge_is_not_persisted(self, client):
        response = client.put("/api/alerts/1-lowstock/acknowledge")
        assert response.status_code == 200
        assert response.json()["alert_id"] == "1-lowstock"
        assert response.json()["persisted"] is False


class TestInsights:
    def test_insights(self, client, insight_generator):
        add(client)
        response = client.post("/api/ai/insights")
        assert response.status_code == 200
        assert response.json()["insights"] == "HEALTH SCORE: 7"
        assert response.json()["snapshot"]["total_products"] == 1

    def test_insights_without_products(self, client):
        response = client.post("/api/ai/insights")
        assert response.status_code == 400
        assert response.json()["error"] == "No products to analyze"

    def test_upstream_unavailable(self, client, insight_generator):
        add(client)
        insight_generator.error = UpstreamUnavailable("Gemini API key not configured")
        response = client.post("/api/ai/insights")
        assert response.status_code == 503
        assert response.json()["code"] == "UPSTREAM_UNAVAILABLE"

    def test_status(self, client):
        assert client.get("/api/ai/status").json()["available"] is True
