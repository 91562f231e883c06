"""
Client-side session state for the SHIFT portal API.

An AuthContext is created explicitly and handed to whatever needs the
current user. Call `init()` before use and `teardown()` when done (or use it
as a context manager); subscribers are told about every auth-state change.
"""
import logging
import re
from typing import Callable, Optional

import httpx

log = logging.getLogger(__name__)

AuthListener = Callable[[str, Optional[dict]], None]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
INITIAL_SESSION = "INITIAL_SESSION"


class AuthError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def digits_only(code: str) -> str:
    return re.sub(r"\D", "", code or "")


class AuthContext:
    def __init__(self, base_url: str = "", http_client: Optional[httpx.Client] = None, access_token: Optional[str] = None):
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=15.0)
        self._listeners: list[AuthListener] = []
        self._signup_token: Optional[str] = None
        self.access_token = access_token
        self.user: Optional[dict] = None
        self.loading = True

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.teardown()

    def init(self) -> Optional[dict]:
        """Restore the session from the stored access token, if any."""
        self.loading = True
        try:
            if self.access_token:
                response = self._http.get("/api/auth/me", headers=self._auth_headers(self.access_token))
                if response.status_code == 200:
                    self.user = response.json()
                else:
                    log.info(f"Stored session rejected ({response.status_code}), signing out")
                    self.access_token = None
                    self.user = None
        finally:
            # Listeners hear about the settled state even if the request failed
            self.loading = False
            self._notify(INITIAL_SESSION)
        return self.user

    def teardown(self):
        self._listeners.clear()
        if self._owns_client:
            self._http.close()

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == "ADMIN"

    def request_code(self, email: str, full_name: str) -> dict:
        response = self._http.post("/api/otp/send", json={"email": email, "fullName": full_name})
        return self._json_or_raise(response)

    def resend_code(self, email: str) -> dict:
        response = self._http.post("/api/otp/resend", json={"email": email})
        return self._json_or_raise(response)

    def verify_code(self, email: str, code: str) -> dict:
        """
        Verify a code typed by the user. Non-digits are stripped before sending.
        Returns the verification payload; a valid result keeps the signup
        token for `create_password`.
        """
        response = self._http.post("/api/otp/verify", json={"email": email, "code": digits_only(code)})
        result = self._json_or_raise(response)
        if result.get("valid"):
            self._signup_token = result.get("signupToken")
        return result

    def create_password(self, password: str, confirm_password: str, country: Optional[str] = None) -> dict:
        if not self._signup_token:
            raise AuthError("Verify your email before setting a password")
        response = self._http.post(
            "/api/auth/create_password",
            json={"password": password, "confirmPassword": confirm_password, "country": country},
            headers=self._auth_headers(self._signup_token),
        )
        self._signed_in(self._json_or_raise(response))
        self._signup_token = None
        return self.user

    def sign_in(self, email: str, password: str) -> dict:
        response = self._http.post("/api/auth/sign_in", json={"email": email, "password": password})
        self._signed_in(self._json_or_raise(response))
        return self.user

    def sign_out(self):
        self.access_token = None
        self.user = None
        self._notify(SIGNED_OUT)

    def authorized_headers(self) -> dict:
        if not self.access_token:
            raise AuthError("Not signed in")
        return self._auth_headers(self.access_token)

    def _signed_in(self, payload: dict):
        self.access_token = payload["accessToken"]
        self.user = payload["user"]
        self._notify(SIGNED_IN)

    def _notify(self, event: str):
        for listener in list(self._listeners):
            listener(event, self.user)

    @staticmethod
    def _auth_headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _json_or_raise(response: httpx.Response) -> dict:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code >= 400:
            message = payload.get("error") or payload.get("detail") or response.text
            if not isinstance(message, str):
                message = str(message)
            raise AuthError(message, status_code=response.status_code)
        return payload
