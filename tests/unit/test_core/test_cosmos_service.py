"""
Unit tests for CosmosService and the dependency providers in core.dependencies.
"""

import pytest
from unittest.mock import Mock, patch
from azure.cosmos.exceptions import CosmosHttpResponseError

from cm_portal.core.config import AppConfig
from cm_portal.core.dependencies import (
    CONTAINER_LAYOUT,
    CosmosService,
    get_component_version_service,
)
from cm_portal.services.components.component_version_service import ComponentVersionService


@pytest.mark.unit
@pytest.mark.critical
class TestCosmosAvailability:

    def test_available_with_endpoint(self, test_config):
        assert CosmosService(test_config).is_available() is True

    def test_unavailable_without_endpoint(self):
        with patch.dict('os.environ', {}, clear=True):
            config = AppConfig(_env_file=None, cosmos_endpoint=None)
            assert CosmosService(config).is_available() is False

    def test_client_requires_endpoint(self):
        with patch.dict('os.environ', {}, clear=True):
            service = CosmosService(AppConfig(_env_file=None, cosmos_endpoint=None))

        with pytest.raises(RuntimeError, match="AZURE_COSMOS_ENDPOINT"):
            service.client


@pytest.mark.unit
class TestContainers:

    def test_container_names_are_prefixed_and_cached(self, test_config):
        service = CosmosService(test_config)
        service._database = Mock()

        first = service.get_container("components")
        second = service.get_container("components")

        assert first is second
        service._database.get_container_client.assert_called_once_with("test_components")

    def test_container_errors_are_wrapped(self, test_config):
        service = CosmosService(test_config)
        service._database = Mock()
        service._database.get_container_client.side_effect = CosmosHttpResponseError(status_code=403, message="Forbidden")

        with pytest.raises(RuntimeError, match="test_components"):
            service.get_container("components")

    def test_ensure_containers_applies_unique_version_key(self, test_config):
        service = CosmosService(test_config)
        service._database = Mock()

        created = service.ensure_containers()

        assert set(created) == set(CONTAINER_LAYOUT)
        calls = {call.kwargs["id"]: call.kwargs for call in service._database.create_container_if_not_exists.call_args_list}
        components = calls["test_components"]
        assert components["partition_key"].path == "/component_code"
        assert components["unique_key_policy"] == {"uniqueKeys": [{"paths": ["/component_code", "/version"]}]}
        assert calls["test_component_files"]["unique_key_policy"] is None


@pytest.mark.unit
class TestProviders:

    def test_version_service_wiring(self, test_config):
        repository, storage, audit = Mock(), Mock(), Mock()

        service = get_component_version_service(repository, storage, audit, test_config)

        assert isinstance(service, ComponentVersionService)
        assert service.repository is repository
        assert service.config is test_config
