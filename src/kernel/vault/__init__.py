"""Vault module - read access to stored credentials."""

from src.kernel.vault.credential_service import CredentialService, CredentialView

__all__ = [
    "CredentialService",
    "CredentialView",
]
