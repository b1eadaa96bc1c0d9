"""Credential provider interface.

The workbench supports two ways of authenticating against the AI service:
a key typed in by the user, and a key managed by the host environment.
Workflows depend only on this interface.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class Credential:
    """Material needed to build an AI client; exactly one field is set."""

    api_key: Optional[str] = None
    token_provider: Optional[Callable[[], str]] = None

    def __post_init__(self):
        if (self.api_key is None) == (self.token_provider is None):
            raise ValueError("Credential requires exactly one of api_key or token_provider")


class CredentialProvider(ABC):
    """Source of the credential for the current session."""

    @abstractmethod
    def has_credential(self) -> bool:
        """Return True when :meth:`request_credential` can succeed without user input."""

    @abstractmethod
    def request_credential(self) -> Credential:
        """Return the current credential or raise ``PreconditionError`` if none is available."""

    @abstractmethod
    def invalidate(self) -> None:
        """Forget the credential after the service rejected it."""
