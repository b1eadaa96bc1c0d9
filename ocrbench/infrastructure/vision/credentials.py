"""Credential providers for the Azure OpenAI client."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from azure.identity import DefaultAzureCredential, get_bearer_token_provider

from ocrbench.config import Settings
from ocrbench.domain.exceptions import PreconditionError
from ocrbench.domain.services.credential_provider import Credential, CredentialProvider

logger = logging.getLogger(__name__)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


class ApiKeyCredentialProvider(CredentialProvider):
    """A key typed in by the user and held for the session only."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key: Optional[str] = None
        if api_key:
            self.set_key(api_key)

    def set_key(self, api_key: str) -> None:
        key = (api_key or "").strip()
        if not key:
            raise PreconditionError("API Key is missing.")
        self._api_key = key

    def has_credential(self) -> bool:
        return self._api_key is not None

    def request_credential(self) -> Credential:
        if self._api_key is None:
            raise PreconditionError("API Key is missing.")
        return Credential(api_key=self._api_key)

    def invalidate(self) -> None:
        if self._api_key is not None:
            logger.info("Discarding rejected API key")
        self._api_key = None


class ManagedCredentialProvider(CredentialProvider):
    """A credential managed by the host (Azure CLI, managed identity, environment)."""

    def __init__(
        self,
        *,
        scope: str = COGNITIVE_SERVICES_SCOPE,
        credential_factory: Callable[[], object] = DefaultAzureCredential,
    ) -> None:
        self._scope = scope
        self._credential_factory = credential_factory
        self._token_provider: Optional[Callable[[], str]] = None

    def has_credential(self) -> bool:
        """Acquire the host identity on first use; False when none is available."""
        try:
            self.request_credential()
        except PreconditionError:
            return False
        return True

    def request_credential(self) -> Credential:
        if self._token_provider is None:
            try:
                self._token_provider = get_bearer_token_provider(self._credential_factory(), self._scope)
            except Exception as exc:  # noqa: BLE001 - azure-identity raises a variety of errors here
                logger.error("Unable to acquire a host-managed credential: %s", exc)
                raise PreconditionError("No host-managed credential is available.") from exc
        return Credential(token_provider=self._token_provider)

    def invalidate(self) -> None:
        self._token_provider = None


def build_credential_provider(settings: Settings) -> CredentialProvider:
    if settings.credential_mode == "managed":
        return ManagedCredentialProvider()
    return ApiKeyCredentialProvider(settings.azure_openai_api_key)
