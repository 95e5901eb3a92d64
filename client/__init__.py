"""Client for the authentication API."""

from .auth_store import AuthState, AuthStore, AuthStoreError, check_reset_form

__all__ = ["AuthState", "AuthStore", "AuthStoreError", "check_reset_form"]
