"""
Accounts Module for Booksy

User registration and login.
"""

from booksy.accounts.service import INVALID_CREDENTIALS, CredentialService

__all__ = [
    "INVALID_CREDENTIALS",
    "CredentialService",
]
