"""
Domain services for business logic that doesn't belong to a specific entity.
"""
from .credential_provider import Credential, CredentialProvider

__all__ = ["Credential", "CredentialProvider"]
