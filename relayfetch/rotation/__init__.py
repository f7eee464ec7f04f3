"""Rotation module - relay credential pool."""

from .credential_pool import AdvanceResult, Credential, CredentialPool

__all__ = ["AdvanceResult", "Credential", "CredentialPool"]
