"""
Access Control

Owner plus an explicit allow-list of authorized callers. Each engine holds its
own AccessControl instance (constructor-injected); the allow-list changes only
through set_authorized_caller, which only the owner may call.

Usage:
    >>> access = AccessControl(owner="0xdeployer")
    >>> access.set_authorized_caller("0xdeployer", "0xmanager", True)
    >>> access.require_authorized("0xmanager")
"""

from loguru import logger

from protected_options.core.clock import Clock
from protected_options.core.errors import (
    InvalidConfigurationError,
    UnauthorizedCallerError,
)
from protected_options.core.events import EventLog, EventType
from protected_options.core.identifiers import is_null

logger = logger.bind(component="AccessControl")


class AccessControl:
    """
    Owner-gated allow-list.

    Attributes:
        owner: The single administrative identity
        authorized: Accounts allowed to call gated operations (owner is implicit)
    """

    def __init__(
        self,
        owner: str,
        events: EventLog | None = None,
        clock: Clock | None = None,
        name: str = "AccessControl",
    ):
        if is_null(owner):
            raise InvalidConfigurationError("Owner must be a non-null account")
        self.owner = owner
        self.authorized: set[str] = set()
        self.events = events
        self.clock = clock
        self.name = name

    def is_authorized(self, account: str) -> bool:
        return account == self.owner or account in self.authorized

    def require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise UnauthorizedCallerError(f"{self.name}: {caller} is not the owner")

    def require_authorized(self, caller: str) -> None:
        if not self.is_authorized(caller):
            raise UnauthorizedCallerError(f"{self.name}: {caller} is not an authorized caller")

    def set_authorized_caller(self, caller: str, account: str, allowed: bool) -> None:
        """Grant or revoke authorized-caller status (owner only)."""
        self.require_owner(caller)
        if is_null(account):
            raise InvalidConfigurationError("Cannot authorize a null account")

        if allowed:
            self.authorized.add(account)
        else:
            self.authorized.discard(account)

        logger.info(f"{self.name}: authorized caller {account} -> {allowed}")
        if self.events is not None:
            self.events.emit(
                EventType.AUTHORIZATION_CHANGED,
                self.name,
                self._now(),
                account=account,
                allowed=allowed,
            )

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_owner(caller)
        if is_null(new_owner):
            raise InvalidConfigurationError("New owner must be a non-null account")

        previous, self.owner = self.owner, new_owner
        logger.warning(f"{self.name}: ownership transferred {previous} -> {new_owner}")
        if self.events is not None:
            self.events.emit(
                EventType.OWNERSHIP_TRANSFERRED,
                self.name,
                self._now(),
                previous_owner=previous,
                new_owner=new_owner,
            )

    def _now(self) -> int:
        return self.clock.now() if self.clock is not None else 0

    def snapshot(self) -> tuple[str, frozenset[str]]:
        return self.owner, frozenset(self.authorized)

    def restore(self, state: tuple[str, frozenset[str]]) -> None:
        self.owner, authorized = state
        self.authorized = set(authorized)

    def __repr__(self) -> str:
        return f"AccessControl(owner={self.owner}, authorized={len(self.authorized)})"
