"""
Identity provider used for the admin login.

`FirebaseAuth` talks to the Firebase Authentication REST endpoint
(Identity Toolkit) with email/password, the same sign-in the web SDK does.
The signed-in user lives on the provider instance; there is no global
session.
"""
from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import httpx
from pydantic import BaseModel, SecretStr

from booking.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Identity Toolkit error codes -> messages shown to the caller
_AUTH_ERRORS = {
    "EMAIL_NOT_FOUND": "There is no user record corresponding to this email.",
    "INVALID_PASSWORD": "The password is invalid.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "MISSING_PASSWORD": "A password is required.",
    "USER_DISABLED": "This user account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many failed login attempts, try again later.",
}


class User(BaseModel):
    uid: str
    email: str
    id_token: SecretStr
    refresh_token: SecretStr | None = None


class IdentityProvider(ABC):
    current_user: User | None = None

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> User:
        """Authenticate and make the user current; AuthenticationError on failure."""
        raise NotImplementedError

    @abstractmethod
    async def sign_out(self) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections; nothing to do by default."""


def _error_message(response: httpx.Response) -> str:
    try:
        code = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"Authentication failed with HTTP {response.status_code}"
    # e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been ..."
    code = code.split(" : ", 1)[0].strip()
    return _AUTH_ERRORS.get(code, code)


class FirebaseAuth(IdentityProvider):
    def __init__(
        self,
        api_key: str | Callable[[], str],
        base_url: str = "https://identitytoolkit.googleapis.com/v1/",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self.current_user = None
        self.sign_in_url = base_url.rstrip("/") + "/accounts:signInWithPassword"
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @functools.cached_property
    def api_key(self) -> SecretStr:
        # a callable is resolved once, on first use
        key = self._api_key() if callable(self._api_key) else self._api_key
        return SecretStr(key)

    async def sign_in(self, email: str, password: str) -> User:
        logger.info("Signing in %s...", email)
        try:
            response = await self.client.post(
                self.sign_in_url,
                params={"key": self.api_key.get_secret_value()},
                json=dict(email=email, password=password, returnSecureToken=True),
            )
        except httpx.HTTPError as err:
            raise AuthenticationError(f"Identity provider unreachable: {err}") from err

        if response.is_error:
            raise AuthenticationError(_error_message(response))

        payload = response.json()
        self.current_user = User(
            uid=payload["localId"],
            email=payload.get("email", email),
            id_token=payload["idToken"],
            refresh_token=payload.get("refreshToken"),
        )
        return self.current_user

    async def sign_out(self) -> None:
        if self.current_user is not None:
            logger.info("Signing out %s", self.current_user.email)
        self.current_user = None

    async def aclose(self) -> None:
        await self.client.aclose()
