"""
Identity Core - account profiles and the active account.
"""

from src.kernel.identity.account_service import Account, AccountService

__all__ = [
    "Account",
    "AccountService",
]
