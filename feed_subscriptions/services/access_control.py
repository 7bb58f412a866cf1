"""Caller authorization and the admin gateway.

An ``AuthorizationVerifier`` answers one question: did the current caller
prove control of a given address? The HTTP layer binds the caller's
credentials per request; in-process callers use the static or allow-all
verifiers.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from feed_subscriptions.exceptions import UnauthorizedError
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.settings import AuthConfig
from feed_subscriptions.repositories.config_store import ConfigStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallerCredentials:
    """Credentials presented by the current caller."""

    address: str
    api_key: Optional[str] = None


_current_caller: ContextVar[Optional[CallerCredentials]] = ContextVar("current_caller", default=None)


def bind_caller(address: str, api_key: Optional[str] = None) -> None:
    """Bind caller credentials to the current context (request or task)."""
    _current_caller.set(CallerCredentials(address=address, api_key=api_key))


def clear_caller() -> None:
    _current_caller.set(None)


def current_caller() -> Optional[CallerCredentials]:
    return _current_caller.get()


class AuthorizationVerifier:
    """Base verifier. Subclasses decide what counts as proof of control."""

    def is_authorized(self, identity: str) -> bool:
        raise NotImplementedError

    def require_auth(self, identity: str) -> None:
        """Ensure the caller controls ``identity``.

        Raises:
            UnauthorizedError: If the caller did not prove control
        """
        if not self.is_authorized(identity):
            logger.warning("authorization_denied", identity=identity)
            raise UnauthorizedError(f"Caller is not authorized as {identity}")


class CallerAuthVerifier(AuthorizationVerifier):
    """Checks the credentials bound for the current request.

    In ``api_key`` mode the caller must present the key configured for the
    address. In ``trusted_caller`` mode the caller address header alone is
    accepted, which suits local development behind a trusted gateway.
    """

    def __init__(self, auth_config: AuthConfig):
        self._mode = auth_config.mode
        self._api_keys: Dict[str, str] = dict(auth_config.api_keys)

    def register_key(self, address: str, api_key: str) -> None:
        self._api_keys[address] = api_key

    def is_authorized(self, identity: str) -> bool:
        caller = current_caller()
        if caller is None or caller.address != identity:
            return False
        if self._mode == "trusted_caller":
            return True
        expected = self._api_keys.get(identity)
        return expected is not None and caller.api_key == expected


class StaticAuthVerifier(AuthorizationVerifier):
    """Verifier with a fixed, mutable set of proven identities."""

    def __init__(self, identities: Iterable[str] = ()):
        self._identities = set(identities)

    def grant(self, identity: str) -> None:
        self._identities.add(identity)

    def revoke(self, identity: str) -> None:
        self._identities.discard(identity)

    def is_authorized(self, identity: str) -> bool:
        return identity in self._identities


class AllowAllAuthVerifier(AuthorizationVerifier):
    """Accepts every identity. Development only."""

    def is_authorized(self, identity: str) -> bool:
        return True


class AdminGateway:
    """Guards admin-only operations."""

    def __init__(self, config_store: ConfigStore, verifier: AuthorizationVerifier):
        self._config_store = config_store
        self._verifier = verifier

    def require_admin(self) -> str:
        """Ensure the caller is the configured admin.

        Returns:
            The admin address

        Raises:
            NotInitializedError: If no admin is configured
            UnauthorizedError: If the caller is not the admin
        """
        self._config_store.require_initialized()
        admin = self._config_store.get_admin()
        self._verifier.require_auth(admin)
        return admin
