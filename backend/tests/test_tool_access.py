"""
Tool runs through the API: authentication, premium gate, monthly quota and
premium exports.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from services.usage_service import month_key, usage_service

ROI_INPUTS = {"inputs": {"gain": 150, "cost": 100}}


def _run(client, slug, headers=None, inputs=None):
    return client.post(f"/api/tools/{slug}/run", json={"inputs": inputs or {}}, headers=headers or {})


class TestToolRunGate:
    def test_anonymous_run_is_rejected(self, client):
        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS)
        assert response.status_code == 401

    def test_unknown_tool_is_404(self, client, free_user):
        response = _run(client, "does-not-exist", free_user.headers)
        assert response.status_code == 404

    def test_free_user_runs_free_tool(self, client, free_user):
        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tool"] == "roi-calculator"
        assert data["result"]["roi"] == 50.0
        assert data["usage"]["tools_used"] == 1
        assert data["usage"]["remaining"] == 9

    def test_free_user_blocked_from_premium_tool(self, client, free_user, fake_db):
        """Premium tools answer 403 with the upgrade message and the denial is audited."""
        response = _run(client, "bmi-calculator", free_user.headers, {"weight": 70, "height": 175})

        assert response.status_code == 403
        assert response.json()["detail"] == (
            "This BMI Calculator feature is only available for premium users. Upgrade to unlock!"
        )
        denied = [a for a in fake_db.audit_logs.docs if a["action"] == "PREMIUM_GATE_DENIED"]
        assert len(denied) == 1
        assert fake_db.tool_usage.docs == []

    def test_premium_category_tools_are_locked(self, client, free_user):
        """Every tool in a premium category is premium."""
        response = _run(client, "slug-generator", free_user.headers, {"text": "Hello World"})
        assert response.status_code == 403

    def test_premium_user_runs_premium_tool(self, client, premium_user):
        response = _run(client, "bmi-calculator", premium_user.headers, {"weight": 70, "height": 175})

        assert response.status_code == 200
        assert response.json()["result"]["category"] == "Normal weight"

    def test_expired_premium_is_treated_as_free(self, client, make_user):
        lapsed = make_user(
            "lapsed@example.com", is_premium=True,
            premium_expires_at=datetime.now(timezone.utc) - timedelta(days=1),
        )
        response = _run(client, "bmi-calculator", lapsed.headers, {"weight": 70, "height": 175})
        assert response.status_code == 403

    def test_premium_feature_inside_free_tool(self, client, free_user):
        """Percentage increase is premium even though the calculator is free."""
        response = _run(client, "percentage-calculator", free_user.headers,
                        {"operation": "increase", "value1": 100, "value2": 10})

        assert response.status_code == 403
        assert "percentage increase" in response.json()["detail"]

    def test_free_user_sees_locked_breakdown(self, client, free_user, premium_user):
        inputs = {"principal": 1000, "rate": 10, "time": 1, "frequency": 1}
        free = _run(client, "compound-interest-calculator", free_user.headers, inputs).json()["result"]
        pro = _run(client, "compound-interest-calculator", premium_user.headers, inputs).json()["result"]

        assert free["amount"] == pro["amount"] == 1100.0
        assert free["locked_features"] == ["schedule"]
        assert "schedule" not in free
        assert pro["schedule"]["rows"] == [[1.0, 1100.0, 100.0]]

    def test_invalid_input_is_400_and_not_counted(self, client, free_user, fake_db):
        response = _run(client, "roi-calculator", free_user.headers, {"gain": 150, "cost": 0})

        assert response.status_code == 400
        assert response.json()["detail"] == "Amount invested must be greater than zero"
        assert fake_db.tool_usage.docs == []


class TestUsageQuota:
    def test_usage_is_tracked_per_month(self, client, free_user, fake_db):
        client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)
        _run(client, "word-counter", free_user.headers, {"text": "one two"})
        client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)

        record = fake_db.tool_usage.docs[0]
        assert record["month"] == month_key()
        assert record["tools_used"] == 3
        assert sorted(record["used_tools"]) == ["roi-calculator", "word-counter"]

    def test_eleventh_run_is_rejected(self, client, free_user, fake_db):
        """The free tier allows 10 runs a month."""
        for _ in range(10):
            response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)
            assert response.status_code == 200

        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)
        assert response.status_code == 429
        assert "10 free tool uses" in response.json()["detail"]
        assert fake_db.tool_usage.docs[0]["tools_used"] == 10
        assert any(a["action"] == "USAGE_LIMIT_REACHED" for a in fake_db.audit_logs.docs)

    def test_previous_month_does_not_count(self, client, free_user, fake_db):
        fake_db.tool_usage.docs.append({
            "user_id": free_user.user_id, "month": "2000-01", "tools_used": 10,
            "last_used": None, "used_tools": ["roi-calculator"],
        })
        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)

        assert response.status_code == 200
        assert response.json()["usage"]["tools_used"] == 1

    def test_premium_runs_are_not_counted(self, client, premium_user, fake_db):
        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=premium_user.headers)

        assert response.status_code == 200
        assert response.json()["usage"]["remaining"] is None
        assert fake_db.tool_usage.docs == []

    def test_usage_endpoint(self, client, free_user):
        client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)
        response = client.get("/api/usage", headers=free_user.headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tools_used"] == 1
        assert data["monthly_limit"] == 10
        assert data["remaining"] == 9
        assert data["is_premium"] is False
        assert data["used_tools"] == ["roi-calculator"]

    def test_premium_status_endpoint(self, client, premium_user, free_user):
        assert client.get("/api/premium/status", headers=premium_user.headers).json() == {
            "is_premium": True, "premium_expires_at": None,
        }
        assert client.get("/api/premium/status", headers=free_user.headers).json()["is_premium"] is False

    def test_run_is_refused_when_quota_fills_during_compute(self, client, free_user, fake_db, monkeypatch):
        """The pre-check can pass while another request takes the last slot."""
        fake_db.tool_usage.docs.append({
            "user_id": free_user.user_id, "month": month_key(), "tools_used": 10,
            "last_used": None, "used_tools": [],
        })

        async def always_allowed(user_id, premium):
            return True
        monkeypatch.setattr(usage_service, "can_use_tool", always_allowed)

        response = client.post("/api/tools/roi-calculator/run", json=ROI_INPUTS, headers=free_user.headers)

        assert response.status_code == 429
        assert fake_db.tool_usage.docs[0]["tools_used"] == 10
        assert len(fake_db.tool_usage.docs) == 1


class TestUsageService:
    @pytest.mark.asyncio
    async def test_concurrent_tracking_stops_at_limit(self, fake_db):
        fake_db.tool_usage.docs.append({
            "user_id": "u1", "month": month_key(), "tools_used": 8, "last_used": None, "used_tools": [],
        })

        results = await asyncio.gather(*[
            usage_service.track_tool_usage("u1", "roi-calculator", False) for _ in range(5)
        ])

        assert sorted(results) == [False, False, False, True, True]
        assert fake_db.tool_usage.docs[0]["tools_used"] == 10

    @pytest.mark.asyncio
    async def test_first_run_of_month_creates_record(self, fake_db):
        assert await usage_service.track_tool_usage("u1", "word-counter", False) is True

        record = fake_db.tool_usage.docs[0]
        assert record["month"] == month_key()
        assert record["tools_used"] == 1
        assert record["used_tools"] == ["word-counter"]

    @pytest.mark.asyncio
    async def test_remaining_uses(self, fake_db):
        assert await usage_service.get_remaining_uses("u1", False) == 10
        assert await usage_service.get_remaining_uses("u1", True) is None

        fake_db.tool_usage.docs.append({
            "user_id": "u1", "month": month_key(), "tools_used": 12, "last_used": None, "used_tools": [],
        })
        assert await usage_service.get_remaining_uses("u1", False) == 0

    @pytest.mark.asyncio
    async def test_summary_agrees_with_remaining_uses(self, fake_db):
        fake_db.tool_usage.docs.append({
            "user_id": "u1", "month": month_key(), "tools_used": 4, "last_used": None, "used_tools": ["x"],
        })

        summary = await usage_service.get_summary("u1", False)

        assert summary["remaining"] == await usage_service.get_remaining_uses("u1", False) == 6
        assert (await usage_service.get_summary("u1", True))["remaining"] is None


class TestExports:
    def _export(self, client, slug, fmt, headers, inputs):
        return client.post(f"/api/tools/{slug}/export?format={fmt}", json={"inputs": inputs}, headers=headers)

    def test_exports_are_premium_only(self, client, free_user):
        response = self._export(client, "roi-calculator", "csv", free_user.headers, {"gain": 150, "cost": 100})

        assert response.status_code == 403
        assert response.json()["detail"] == (
            "This export feature is only available for premium users. Upgrade to unlock!"
        )

    def test_csv_export(self, client, premium_user, fake_db):
        response = self._export(client, "roi-calculator", "csv", premium_user.headers, {"gain": 150, "cost": 100})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="roi-calculator.csv"' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "Metric,Value"
        assert "ROI (%),50.0" in lines
        assert fake_db.tool_usage.docs == []

    def test_pdf_export(self, client, premium_user):
        response = self._export(client, "loan-emi-calculator", "pdf", premium_user.headers,
                                {"principal": 100000, "rate": 12, "tenure": 1})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_invoice_pdf_uses_document_layout(self, client, premium_user):
        inputs = {
            "company": {"name": "Acme Ltd"},
            "client": {"name": "Globex"},
            "items": [{"description": "Consulting", "quantity": 2, "price": 150}],
            "tax_rate": 10,
        }
        response = self._export(client, "invoice-generator", "pdf", premium_user.headers, inputs)

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_business_card_pdf(self, client, premium_user):
        response = self._export(client, "business-card-maker", "pdf", premium_user.headers,
                                {"name": "Ada Lovelace", "title": "Engineer", "alignment": "center"})
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_unsupported_format_is_400(self, client, premium_user):
        response = self._export(client, "roi-calculator", "svg", premium_user.headers, {"gain": 150, "cost": 100})

        assert response.status_code == 400
        assert "does not support SVG export" in response.json()["detail"]

    def test_svg_export_of_qr_code(self, client, premium_user):
        response = self._export(client, "qr-generator", "svg", premium_user.headers, {"text": "https://example.com"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert b"<svg" in response.content

    def test_json_export_of_palette(self, client, premium_user):
        response = self._export(client, "color-palette-generator", "json", premium_user.headers, {"seed": 7})

        assert response.status_code == 200
        assert len(response.json()["colors"]) == 5

    def test_export_with_invalid_inputs_is_400(self, client, premium_user):
        response = self._export(client, "roi-calculator", "csv", premium_user.headers, {"gain": 150})
        assert response.status_code == 400
