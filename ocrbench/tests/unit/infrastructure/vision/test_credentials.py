from unittest.mock import Mock, patch

import pytest

from ocrbench.config import Settings
from ocrbench.domain.exceptions import PreconditionError
from ocrbench.domain.services.credential_provider import Credential
from ocrbench.infrastructure.vision.credentials import (
    ApiKeyCredentialProvider,
    ManagedCredentialProvider,
    build_credential_provider,
)


def test_credential_requires_exactly_one_source():
    with pytest.raises(ValueError):
        Credential()
    with pytest.raises(ValueError):
        Credential(api_key="k", token_provider=lambda: "t")


class TestApiKeyCredentialProvider:
    def test_without_key(self):
        provider = ApiKeyCredentialProvider()
        assert not provider.has_credential()
        with pytest.raises(PreconditionError):
            provider.request_credential()

    def test_set_key_strips_whitespace(self):
        provider = ApiKeyCredentialProvider()
        provider.set_key("  secret  ")
        assert provider.request_credential().api_key == "secret"

    def test_blank_key_rejected(self):
        with pytest.raises(PreconditionError):
            ApiKeyCredentialProvider().set_key("   ")

    def test_invalidate_forgets_key(self):
        provider = ApiKeyCredentialProvider("secret")
        provider.invalidate()
        assert not provider.has_credential()


class TestManagedCredentialProvider:
    def test_builds_token_provider_once(self):
        factory = Mock(return_value="azure-credential")
        with patch(
            "ocrbench.infrastructure.vision.credentials.get_bearer_token_provider",
            return_value=lambda: "token",
        ) as bearer:
            provider = ManagedCredentialProvider(credential_factory=factory)
            factory.assert_not_called()
            credential = provider.request_credential()
            provider.request_credential()

        assert credential.token_provider() == "token"
        factory.assert_called_once_with()
        bearer.assert_called_once_with("azure-credential", "https://cognitiveservices.azure.com/.default")

    def test_reports_available_host_credential_before_first_request(self):
        factory = Mock(return_value="azure-credential")
        with patch(
            "ocrbench.infrastructure.vision.credentials.get_bearer_token_provider",
            return_value=lambda: "token",
        ):
            provider = ManagedCredentialProvider(credential_factory=factory)
            assert provider.has_credential() is True
            provider.request_credential()

        factory.assert_called_once_with()

    def test_unavailable_host_credential(self):
        provider = ManagedCredentialProvider(credential_factory=Mock(side_effect=RuntimeError("no identity")))
        assert provider.has_credential() is False
        with pytest.raises(PreconditionError):
            provider.request_credential()


def test_build_credential_provider_by_mode():
    assert isinstance(build_credential_provider(Settings(OCRBENCH_CREDENTIAL_MODE="managed")), ManagedCredentialProvider)
    provider = build_credential_provider(Settings(OCRBENCH_CREDENTIAL_MODE="api_key", AZURE_OPENAI_API_KEY="seed"))
    assert isinstance(provider, ApiKeyCredentialProvider)
    assert provider.has_credential()
