"""
Per-request authentication state.

AuthContext is the single source of truth for "who is logged in" while a
request is handled. It is built from the session cookies, gated on the
existence of a user profile, and kept current by the Supabase client's
auth-state-change notifications until it is closed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from supabase import Client

logger = logging.getLogger(__name__)

# Default storage key of the Supabase auth client; the PKCE verifier lives under it
SUPABASE_STORAGE_KEY = "supabase.auth.token"

PROFILE_NOT_FOUND_CODE = "PGRST116"

AUTH_PAGE_PATHS = ("/login", "/register", "/setup-profile", "/forgot-password")
AUTH_PAGE_PREFIXES = ("/register/", "/auth/")


class AuthState(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED_NO_PROFILE = "authenticated_no_profile"
    AUTHENTICATED = "authenticated"


@dataclass
class AuthResult:
    error: Optional[str] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_auth_page(path: str) -> bool:
    """Auth-flow pages accept a signed-in user before their profile exists."""
    return path in AUTH_PAGE_PATHS or path.startswith(AUTH_PAGE_PREFIXES)


def user_to_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": getattr(user, "email", None),
        "user_metadata": getattr(user, "user_metadata", None) or {},
        "app_metadata": getattr(user, "app_metadata", None) or {},
    }


class AuthContext:
    def __init__(self, supabase: Client, path: str = "/"):
        self.supabase = supabase
        self.path = path
        self.user = None
        self.session = None
        self.state = AuthState.LOADING
        self._subscription = None

    @property
    def loading(self) -> bool:
        return self.state == AuthState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def user_data(self) -> Optional[Dict[str, Any]]:
        return user_to_dict(self.user) if self.user else None

    def start(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None) -> "AuthContext":
        """Load the initial session, then follow auth-state changes."""
        try:
            if access_token and refresh_token:
                self.supabase.auth.set_session(access_token, refresh_token)
            session = self.supabase.auth.get_session()
            self._apply_session(session)
        except Exception as e:
            logger.error(f"Error getting session: {e}")
            self._clear()
        self._subscription = self.supabase.auth.on_auth_state_change(self._on_auth_state_change)
        return self

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_state_change(self, event, session):
        logger.debug(f"Auth state changed: {event}")
        try:
            self._apply_session(session)
        except Exception as e:
            logger.error(f"Error handling auth state change {event}: {e}")
            self._clear()

    def _apply_session(self, session):
        if not session or not getattr(session, "user", None):
            self._clear()
            return

        self.state = AuthState.AUTHENTICATED_NO_PROFILE
        if is_auth_page(self.path):
            self._set(session)
            return

        if self.validate_user_profile(session.user.id):
            self._set(session)
        else:
            logger.warning(f"User profile not found for {session.user.id}, signing out user")
            self._force_sign_out()

    def _set(self, session):
        self.session = session
        self.user = session.user
        self.state = AuthState.AUTHENTICATED

    def _clear(self):
        self.session = None
        self.user = None
        self.state = AuthState.ANONYMOUS

    def _force_sign_out(self):
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.error(f"Sign out error: {e}")
        self._clear()

    def validate_user_profile(self, user_id: str) -> bool:
        try:
            result = self.supabase.table("user_profiles")\
                .select("id")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            return bool(result and result.data)
        except Exception as e:
            if getattr(e, "code", None) != PROFILE_NOT_FOUND_CODE:
                logger.error(f"Error checking user profile: {e}")
            return False

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
            if not response.session:
                return AuthResult(error="Invalid login credentials")
            return AuthResult()
        except Exception as e:
            logger.error(f"Sign in error: {e}")
            return AuthResult(error=str(e))

    def sign_up(self, email: str, password: str, user_data: Dict[str, Any]) -> AuthResult:
        try:
            response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": user_data,
                },
            })
            return AuthResult(data=response)
        except Exception as e:
            logger.error(f"Sign up error: {e}")
            return AuthResult(error=str(e))

    def sign_in_with_google(self, origin: str, redirect_path: Optional[str] = None) -> AuthResult:
        """Start the Google OAuth flow. data is the provider URL to redirect the browser to."""
        try:
            redirect_to = f"{origin}/auth/callback"
            if redirect_path:
                redirect_to += "?" + urlencode({"next": redirect_path})
            response = self.supabase.auth.sign_in_with_oauth({
                "provider": "google",
                "options": {
                    "redirect_to": redirect_to,
                    "query_params": {
                        "access_type": "offline",
                        "prompt": "consent",
                    },
                },
            })
            return AuthResult(data=response.url)
        except Exception as e:
            logger.error(f"Google sign in error: {e}")
            return AuthResult(error=str(e))

    def get_code_verifier(self) -> Optional[str]:
        """PKCE verifier stored by the last OAuth start, if the client kept one."""
        storage = getattr(getattr(self.supabase, "options", None), "storage", None)
        if storage is None:
            return None
        return storage.get_item(f"{SUPABASE_STORAGE_KEY}-code-verifier")

    def sign_out(self):
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.error(f"Sign out error: {e}")
        self._clear()

    def refresh_session(self) -> bool:
        try:
            response = self.supabase.auth.refresh_session()
            session = response.session if response else None
            if session and session.user:
                self._set(session)
                return True
            return False
        except Exception as e:
            logger.error(f"Session refresh error: {e}")
            return False

    def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> AuthResult:
        try:
            options = {"redirect_to": redirect_to} if redirect_to else {}
            self.supabase.auth.reset_password_for_email(email, options)
            return AuthResult()
        except Exception as e:
            logger.error(f"Password reset error: {e}")
            return AuthResult(error=str(e))
