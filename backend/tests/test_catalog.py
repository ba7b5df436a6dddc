"""
Catalog browsing and service endpoints.
"""
from tools import CATEGORIES, is_premium_tool, registered_slugs
from tools.catalog import tool_name


class TestCatalogData:
    def test_every_catalog_tool_is_registered(self):
        catalog_slugs = sorted(slug for category in CATEGORIES for slug in category["tools"])

        assert len(catalog_slugs) == 77
        assert len(set(catalog_slugs)) == 77
        assert registered_slugs() == catalog_slugs

    def test_premium_flags(self):
        assert is_premium_tool("slug-generator")
        assert is_premium_tool("qr-generator")
        assert is_premium_tool("bmi-calculator")
        assert not is_premium_tool("roi-calculator")
        assert not is_premium_tool("word-counter")

    def test_tool_names(self):
        assert tool_name("loan-emi-calculator") == "Loan EMI Calculator"
        assert tool_name("ab-test-significance-calculator") == "AB Test Significance Calculator"
        assert tool_name("hex-rgb-converter") == "Hex RGB Converter"


class TestCatalogRoutes:
    def test_list_categories(self, client):
        response = client.get("/api/catalog/categories")

        assert response.status_code == 200
        categories = response.json()["categories"]
        assert len(categories) == 8
        by_slug = {c["slug"]: c for c in categories}
        assert by_slug["financial-wizards"]["tool_count"] == 11
        assert by_slug["marketing-tools"]["premium"] is True
        assert "tools" not in by_slug["financial-wizards"]

    def test_anonymous_category_shows_locks(self, client):
        response = client.get("/api/catalog/categories/math-and-engineering")

        assert response.status_code == 200
        tools = {t["slug"]: t for t in response.json()["tools"]}
        assert tools["bmi-calculator"]["locked"] is True
        assert tools["area-calculator"]["locked"] is False
        assert tools["area-calculator"]["name"] == "Area Calculator"

    def test_premium_caller_sees_nothing_locked(self, client, premium_user):
        response = client.get("/api/catalog/categories/marketing-tools", headers=premium_user.headers)

        assert response.status_code == 200
        assert not any(t["locked"] for t in response.json()["tools"])

    def test_free_caller_sees_premium_category_locked(self, client, free_user):
        response = client.get("/api/catalog/categories/design-generators", headers=free_user.headers)
        assert all(t["locked"] for t in response.json()["tools"])

    def test_tool_detail(self, client):
        response = client.get("/api/catalog/tools/jwt-decoder")

        assert response.status_code == 200
        assert response.json() == {
            "slug": "jwt-decoder",
            "name": "JWT Decoder",
            "description": "Decode header & payload (no verification)",
            "category": "developer-tools",
            "premium": True,
            "locked": True,
        }

    def test_unknown_category_and_tool(self, client):
        assert client.get("/api/catalog/categories/nope").status_code == 404
        assert client.get("/api/catalog/tools/nope").status_code == 404


class TestServiceEndpoints:
    def test_root(self, client):
        data = client.get("/api").json()

        assert data["service"] == "ToolHub"
        assert data["status"] == "operational"
        assert data["version"] == "1.0.0"

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"

    def test_validation_error_carries_request_id(self, client):
        """Malformed bodies answer 422 with a request_id to match the log line."""
        response = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "x"})

        assert response.status_code == 422
        data = response.json()
        assert data["request_id"]
        assert data["detail"][0]["loc"][-1] == "email"
