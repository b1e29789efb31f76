"""
Unit Tests - HTTP API
"""
import pytest
from fastapi.testclient import TestClient

from backoffice.config import Settings
from backoffice.container import create_backoffice
from backoffice.main import create_app
from backoffice.serving.api.dependencies import get_owner_id
from backoffice.storage.seed import seed_sample_data


@pytest.fixture
def seeded_client(clock, test_settings) -> TestClient:
    """API client over the demo shop"""
    backoffice = create_backoffice(clock=clock)
    owner_id = seed_sample_data(backoffice)
    app = create_app(backoffice=backoffice, settings=test_settings)
    app.dependency_overrides[get_owner_id] = lambda: owner_id
    return TestClient(app)


class TestHealth:
    """Tests for the health endpoint"""
    
    def test_health(self, client):
        """Test health reports record counts"""
        response = client.get("/api/health")
        
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["records"]["users"] == 1
        assert "X-Request-ID" in response.headers
    
    def test_metrics_exposed(self, client):
        """Test served requests show up in the Prometheus exposition"""
        client.get("/api/health")
        
        response = client.get("/api/metrics")
        
        assert response.status_code == 200
        assert 'backoffice_http_requests_total{method="GET",route="/api/health",status="200"}' in response.text
    
    def test_metrics_route_labels(self, client, product_data):
        """Test each endpoint is labelled by its full templated path"""
        product_id = client.post("/api/products", json=product_data).json()["id"]
        client.get("/api/products")
        client.get("/api/tags")
        client.get(f"/api/products/{product_id}")
        client.get("/api/no-such-endpoint")
        
        text = client.get("/api/metrics").text
        
        assert 'route="/api/products",status="200"' in text
        assert 'route="/api/tags",status="200"' in text
        assert 'route="/api/products/{product_id}",status="200"' in text
        assert 'route="unmatched",status="404"' in text
        assert f'route="/api/products/{product_id}"' not in text
        assert 'route=""' not in text


class TestProductEndpoints:
    """Tests for product CRUD over HTTP"""
    
    def test_create_and_fetch(self, client, product_data):
        """Test a created product can be read back"""
        created = client.post("/api/products", json=product_data)
        
        assert created.status_code == 201
        product_id = created.json()["id"]
        fetched = client.get(f"/api/products/{product_id}")
        assert fetched.json()["name"] == "Premium Headphones"
        assert fetched.json()["source"] == "manual"
    
    def test_invalid_payload_returns_field_errors(self, client):
        """Test validation failures become 400 with per-field messages"""
        response = client.post("/api/products", json={"name": "", "price": -1, "cost": 1})
        
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid product data"
        assert {"name", "price"} <= set(body["errors"])
    
    def test_missing_product_404(self, client):
        """Test absent records map to 404"""
        assert client.get("/api/products/999").status_code == 404
        assert client.patch("/api/products/999", json={"stock": 1}).status_code == 404
        assert client.delete("/api/products/999").status_code == 404
    
    def test_patch_and_delete(self, client, product_data):
        """Test partial updates and deletes"""
        product_id = client.post("/api/products", json=product_data).json()["id"]
        
        patched = client.patch(f"/api/products/{product_id}", json={"stock": 3})
        deleted = client.delete(f"/api/products/{product_id}")
        
        assert patched.json()["stock"] == 3
        assert patched.json()["price"] == 159.0
        assert deleted.status_code == 204
        assert client.get(f"/api/products/{product_id}").status_code == 404
    
    def test_tag_association(self, client, product_data):
        """Test tags can be attached, listed and removed"""
        product_id = client.post("/api/products", json=product_data).json()["id"]
        tag_id = client.post("/api/tags", json={"name": "Sale"}).json()["id"]
        
        client.post(f"/api/products/{product_id}/tags", json={"tag_id": tag_id})
        tags = client.get(f"/api/products/{product_id}/tags").json()
        removed = client.delete(f"/api/products/{product_id}/tags/{tag_id}")
        
        assert [t["name"] for t in tags] == ["Sale"]
        assert removed.status_code == 204
        assert client.get(f"/api/products/{product_id}/tags").json() == []
        assert client.delete(f"/api/products/{product_id}/tags/{tag_id}").status_code == 404


class TestOrderEndpoints:
    """Tests for orders, items and returns over HTTP"""
    
    def test_order_with_items(self, client, order_data, product_data):
        """Test items posted with an order come back in its detail"""
        product = client.post("/api/products", json=product_data).json()
        item = {
            "product_id": product["id"], "product_name": product["name"],
            "price": 159.0, "quantity": 1, "total": 159.0,
        }
        
        created = client.post("/api/orders", json=dict(order_data, items=[item]))
        detail = client.get(f"/api/orders/{created.json()['id']}").json()
        
        assert created.status_code == 201
        assert detail["status"] == "pending"
        assert [i["product_name"] for i in detail["items"]] == ["Premium Headphones"]
    
    def test_bad_item_field_path(self, client, order_data):
        """Test item errors are keyed by their position"""
        response = client.post("/api/orders", json=dict(order_data, items=[{"product_id": 1}]))
        
        assert response.status_code == 400
        assert "items.0.product_name" in response.json()["errors"]
    
    def test_items_must_be_list(self, client, order_data):
        """Test a non-list items value is rejected"""
        response = client.post("/api/orders", json=dict(order_data, items="nope"))
        
        assert response.status_code == 400
        assert "items" in response.json()["errors"]
    
    def test_get_order_item(self, client, order_data, product_data):
        """Test a single line item can be fetched by id"""
        product = client.post("/api/products", json=product_data).json()
        order_id = client.post("/api/orders", json=order_data).json()["id"]
        item_id = client.post(f"/api/orders/{order_id}/items", json={
            "product_id": product["id"], "product_name": product["name"],
            "price": 159.0, "quantity": 2, "total": 318.0,
        }).json()["id"]
        
        fetched = client.get(f"/api/orders/items/{item_id}")
        
        assert fetched.status_code == 200
        assert fetched.json()["order_id"] == order_id
        assert fetched.json()["quantity"] == 2
        assert client.get("/api/orders/items/999").status_code == 404
    
    def test_item_on_missing_order(self, client):
        """Test adding an item to an unknown order is a 404"""
        response = client.post("/api/orders/42/items", json={
            "product_id": 1, "product_name": "Mug", "price": 1, "quantity": 1, "total": 1,
        })
        
        assert response.status_code == 404
    
    def test_return_embeds_order(self, client, order_data):
        """Test return detail includes the order it refers to"""
        order_id = client.post("/api/orders", json=order_data).json()["id"]
        created = client.post("/api/returns", json={
            "order_id": order_id, "reason": "Damaged", "requested_items": [],
        })
        
        listed = client.get("/api/returns").json()
        
        assert created.status_code == 201
        assert listed[0]["order"]["id"] == order_id
        assert listed[0]["status"] == "pending"
    
    def test_return_on_missing_order(self, client):
        """Test returns for unknown orders are a validation failure"""
        response = client.post("/api/returns", json={
            "order_id": 42, "reason": "Damaged", "requested_items": [],
        })
        
        assert response.status_code == 400
        assert "order_id" in response.json()["errors"]


class TestSeededShop:
    """Tests against the demo shop"""
    
    def test_dashboard_totals(self, seeded_client):
        """Test the dashboard figures for the demo data"""
        body = seeded_client.get("/api/analytics/dashboard").json()
        
        assert body["stats"] == {
            "total_revenue": 737.0,
            "total_profit": 351.0,
            "total_customers": 4,
            "active_products": 4,
        }
        assert {c["name"]: c["count"] for c in body["product_counts_by_category"]} == {
            "Footwear": 1, "Apparel": 1, "Electronics": 2,
        }
        assert [d["name"] for d in body["active_discounts"]] == ["Summer Sale", "New Customer"]
        assert len(body["recent_orders"]) == 4
    
    def test_product_revenue(self, seeded_client):
        """Test revenue rows for the demo orders"""
        rows = seeded_client.get("/api/analytics/product-revenue").json()
        
        assert {r["name"]: r["revenue"] for r in rows} == {
            "Premium Headphones": 318.0,
            "Running Shoes": 120.0,
            "T-Shirt": 50.0,
            "Smart Watch": 249.0,
        }
    
    def test_product_revenue_window(self, seeded_client):
        """Test a window ending before the demo orders is empty"""
        response = seeded_client.get(
            "/api/analytics/product-revenue", params={"end_date": "2025-01-14T00:00:00"}
        )
        
        assert response.json() == []
    
    def test_discount_status_filter(self, seeded_client):
        """Test discounts can be filtered by display status"""
        scheduled = seeded_client.get("/api/discounts", params={"status": "scheduled"}).json()
        
        assert [(d["name"], d["status"]) for d in scheduled] == [("Weekend Flash", "scheduled")]
        assert len(seeded_client.get("/api/discounts/active").json()) == 2
    
    def test_refund_quote(self, seeded_client):
        """Test the refund quote for the watch on the returned order"""
        returned = seeded_client.get("/api/returns").json()[0]
        
        quote = seeded_client.get(
            f"/api/orders/{returned['order_id']}/refund-amount",
            params={"item_ids": returned["requested_items"]},
        ).json()
        
        assert quote["refund_amount"] == returned["refund_amount"] == 249.0
    
    def test_integrity_report(self, seeded_client):
        """Test the demo shop audits clean"""
        body = seeded_client.get("/api/analytics/integrity").json()
        
        assert body["status"] == "passed"
        assert body["total_checks"] == 9


class TestAppSettings:
    """Tests for settings passed to the application factory"""
    
    @pytest.fixture
    def seeded(self, clock):
        backoffice = create_backoffice(clock=clock)
        owner_id = seed_sample_data(backoffice)
        return backoffice, owner_id
    
    def test_configured_owner(self, seeded):
        """Test requests act as the configured default owner"""
        backoffice, _ = seeded
        newcomer = backoffice.users.create_user({
            "username": "newcomer", "name": "New Comer", "email": "new@example.com",
        })
        settings = Settings(app_env="testing", seed_sample_data=False, default_owner_id=newcomer.id)
        client = TestClient(create_app(backoffice=backoffice, settings=settings))
        
        stats = client.get("/api/analytics/dashboard").json()["stats"]
        
        assert stats["total_revenue"] == 0.0
        assert stats["total_customers"] == 0
        assert client.get("/api/products").json() == []
    
    def test_configured_recent_limit(self, seeded):
        """Test the dashboard and recent orders honour the configured limit"""
        backoffice, owner_id = seeded
        settings = Settings(
            app_env="testing",
            seed_sample_data=False,
            default_owner_id=owner_id,
            recent_orders_limit=1,
        )
        client = TestClient(create_app(backoffice=backoffice, settings=settings))
        
        dashboard = client.get("/api/analytics/dashboard").json()
        recent = client.get("/api/orders/recent").json()
        health = client.get("/api/health").json()
        
        assert dashboard["stats"]["total_revenue"] == 737.0
        assert len(dashboard["recent_orders"]) == 1
        assert len(recent) == 1
        assert health["environment"] == "testing"
    
    def test_app_name_and_debug(self, backoffice):
        """Test the application title and debug flag come from settings"""
        settings = Settings(app_env="testing", app_name="Corner Shop", debug=True, seed_sample_data=False)
        
        app = create_app(backoffice=backoffice, settings=settings)
        
        assert app.title == "Corner Shop"
        assert app.debug is True
