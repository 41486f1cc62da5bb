"""
Router tests for the CM browse endpoints under /api/cm.
"""

import pytest


@pytest.mark.unit
class TestListCms:

    def test_default_page(self, app_client):
        response = app_client.get("/api/cm")

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["per_page"] == 10
        assert body["total"] == 12
        assert body["total_pages"] == 2
        assert [row["cm_code"] for row in body["records"]][:2] == ["CM001", "CM002"]
        assert body["records"][0]["status_colour"] == "#30ea03"

    def test_filters_combine(self, app_client):
        response = app_client.get(
            "/api/cm",
            params=[("signoff_status", "Pending"), ("signoff_status", "Rejected"), ("cm_code", "CM002"), ("cm_code", "CM003"), ("cm_code", "CM004")],
        )

        body = response.json()
        assert [row["cm_code"] for row in body["records"]] == ["CM002", "CM003"]
        assert body["total"] == 2

    def test_all_returns_one_page(self, app_client):
        response = app_client.get("/api/cm", params={"per_page": "All", "page": 3})

        body = response.json()
        assert body["per_page"] == "All"
        assert body["page"] == 1
        assert body["total_pages"] == 1
        assert len(body["records"]) == 12

    def test_page_beyond_range_is_clamped(self, app_client):
        response = app_client.get("/api/cm", params={"per_page": "5", "page": 9})

        body = response.json()
        assert body["page"] == 3
        assert [row["cm_code"] for row in body["records"]] == ["CM011", "CM012"]

    def test_unsupported_page_size(self, app_client):
        response = app_client.get("/api/cm", params={"per_page": "7"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_non_numeric_page(self, app_client):
        response = app_client.get("/api/cm", params={"page": "first"})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"


@pytest.mark.unit
class TestFilterOptionsAndDetail:

    def test_filter_options(self, app_client):
        body = app_client.get("/api/cm/filter-options").json()

        assert len(body["cm_codes"]) == 12
        assert body["signoff_statuses"] == ["Signed", "Pending", "Rejected"]
        assert body["per_page_options"] == [5, 10, 20, 25, "All"]

    def test_detail(self, app_client):
        response = app_client.get("/api/cm/CM003")

        assert response.status_code == 200
        body = response.json()
        assert body["cm"]["cm_description"] == "Gamma Plastics"
        assert body["cm"]["status_colour"] == "#ff3b3b"
        assert len(body["skus"]) == 3

    def test_unknown_cm(self, app_client):
        response = app_client.get("/api/cm/CM999")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "CM_NOT_FOUND"
        assert body["message"] == "No details found for CM Code: CM999"
