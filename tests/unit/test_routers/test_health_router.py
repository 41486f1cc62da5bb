"""
Router tests for GET /api/system/health.
"""

from unittest.mock import Mock

import pytest

from cm_portal.core.config import AppConfig
from cm_portal.core.dependencies import get_app_config, get_cosmos_service


def _override(config, cosmos_available: bool):
    from cm_portal.main import app

    cosmos = Mock()
    cosmos.is_available.return_value = cosmos_available
    app.dependency_overrides[get_app_config] = lambda: config
    app.dependency_overrides[get_cosmos_service] = lambda: cosmos


@pytest.mark.unit
class TestHealth:

    def test_healthy_when_everything_configured(self, app_client, test_config):
        _override(test_config, cosmos_available=True)

        response = app_client.get("/api/system/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services"] == {"cosmos": "configured", "blob_storage": "configured"}
        assert body["version"] == test_config.app_version

    def test_degraded_without_storage(self, app_client):
        _override(AppConfig(_env_file=None, azure_storage_account_url=None), cosmos_available=False)

        response = app_client.get("/api/system/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["services"]["cosmos"] == "not_configured"
        assert body["services"]["blob_storage"] == "not_configured"
