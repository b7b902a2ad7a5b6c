import logging
from typing import List, Optional, Tuple
from urllib.parse import quote

from fastapi.responses import RedirectResponse, Response
from supabase import Client

from app.config.settings import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

AUTH_ERROR_PATH = "/auth/auth-code-error"
DEFAULT_NEXT_PATH = "/login"

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "!~*'()"


def code_verifier_cookie_name() -> str:
    return f"{settings.auth_storage_key}-code-verifier"


def set_session_cookies(response: Response, session) -> None:
    for name, value in (
        (ACCESS_TOKEN_COOKIE, session.access_token),
        (REFRESH_TOKEN_COOKIE, session.refresh_token),
    ):
        response.set_cookie(
            key=name,
            value=value,
            path="/",
            samesite="lax",
            httponly=True,
            secure=not settings.is_local_env,
        )


def session_cookie_headers(session) -> List[Tuple[bytes, bytes]]:
    """Raw Set-Cookie headers for session, for use outside a Response object"""
    response = Response()
    set_session_cookies(response, session)
    return [(name, value) for name, value in response.raw_headers if name == b"set-cookie"]


def sets_session_cookie(headers: List[Tuple[bytes, bytes]]) -> bool:
    prefix = f"{ACCESS_TOKEN_COOKIE}=".encode()
    return any(name.lower() == b"set-cookie" and value.startswith(prefix) for name, value in headers)


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(REFRESH_TOKEN_COOKIE, path="/")


def tokens_rotated(session, access_token: Optional[str], refresh_token: Optional[str]) -> bool:
    """The client refreshed an expired session while restoring it; the cookies are stale."""
    if session is None or not access_token:
        return False
    return (session.access_token, session.refresh_token) != (access_token, refresh_token)


def auth_error_url(origin: str, reason: str) -> str:
    return f"{origin}{AUTH_ERROR_PATH}?error={quote(reason, safe=_URI_COMPONENT_SAFE)}"


def safe_next_path(next_path: Optional[str]) -> Optional[str]:
    """next_path if it is a path on this site, else None"""
    if next_path and next_path.startswith("/") and not next_path.startswith(("//", "/\\")):
        return next_path
    return None


def resolve_redirect_url(origin: str, next_path: str, forwarded_host: Optional[str] = None) -> str:
    """Behind a proxy the public host arrives in x-forwarded-host; ignored in local development."""
    if forwarded_host and not settings.is_local_env:
        return f"https://{forwarded_host}{next_path}"
    return f"{origin}{next_path}"


class AuthService:
    """Server side half of the OAuth flow: code exchange and session cookies."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def exchange_code(self, code: str, code_verifier: Optional[str] = None):
        params = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        response = self.supabase.auth.exchange_code_for_session(params)
        return response.session if response else None

    def handle_callback(
        self,
        origin: str,
        code: Optional[str],
        next_path: str = DEFAULT_NEXT_PATH,
        forwarded_host: Optional[str] = None,
        code_verifier: Optional[str] = None,
    ) -> RedirectResponse:
        if not code:
            logger.warning("OAuth callback received without a code")
            return RedirectResponse(auth_error_url(origin, "no_code"), status_code=302)

        try:
            try:
                session = self.exchange_code(code, code_verifier)
            except Exception as e:
                logger.error(f"Code exchange error: {e}")
                return RedirectResponse(auth_error_url(origin, str(e)), status_code=302)

            redirect_url = resolve_redirect_url(
                origin, safe_next_path(next_path) or DEFAULT_NEXT_PATH, forwarded_host
            )
            logger.info(f"OAuth code exchange successful, redirecting to {redirect_url}")

            response = RedirectResponse(redirect_url, status_code=302)
            if session:
                set_session_cookies(response, session)
            response.delete_cookie(code_verifier_cookie_name(), path="/")
            return response
        except Exception as e:
            logger.exception(f"Unexpected error in OAuth callback: {e}")
            return RedirectResponse(auth_error_url(origin, "unexpected"), status_code=302)
