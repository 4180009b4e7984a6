"""Shared utilities for the CampusCare pipeline."""
from .pii import configure_pii_salt, hash_pii, hash_text_for_audit

__all__ = ["configure_pii_salt", "hash_pii", "hash_text_for_audit"]
