"""
Protected Options Error Taxonomy

All failures raised by the protocol derive from ProtectedOptionError and fall
into one of a handful of categories so callers can present an actionable
message instead of a generic failure.

Categories:
- ConfigurationError: out-of-invariant parameters, rejected before any state change
- MarketDataError: oracle data unusable (stale or non-positive price)
- AuthorizationError: caller lacks the required role
- LifecycleError: position or linked config in the wrong state for the operation
- AssetTransferError: ledger movement refused (balance or allowance too low)

Example:
    >>> try:
    ...     manager.execute(caller, position_id, taking_amount)
    ... except StopLossTriggeredError as e:
    ...     print(f"Cancel instead: {e}")
"""


class ProtectedOptionError(Exception):
    """
    Base exception for the protected options protocol.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.message}')"

    def __str__(self) -> str:
        return self.message


# Categories


class ConfigurationError(ProtectedOptionError):
    """Caller supplied parameters outside the documented invariants."""


class MarketDataError(ProtectedOptionError):
    """Oracle data is unusable for the requested evaluation."""


class AuthorizationError(ProtectedOptionError):
    """Caller lacks the role required by the operation."""


class LifecycleError(ProtectedOptionError):
    """Target position or config is not in a compatible state."""


class AssetTransferError(ProtectedOptionError):
    """Ledger refused to move assets."""


# Configuration errors


class InvalidOptionConfigError(ConfigurationError):
    """Option parameters violate strike/multiplier/expiration/oracle invariants."""


class InvalidMaxLossError(ConfigurationError):
    """Stop-loss max loss outside 1..9000 basis points."""


class InvalidTimeWindowError(ConfigurationError):
    """Stop-loss time window shorter than the minimum."""


class InvalidConfigurationError(ConfigurationError):
    """Generic invalid configuration (zero price, null oracle, null asset, zero amount)."""


class InvalidOptionDurationError(ConfigurationError):
    """Position duration outside the allowed range."""


# Market data errors


class StalePriceError(MarketDataError):
    """
    Oracle price is older than the consumer's tolerance.

    Attributes:
        age: Age of the price in seconds
        max_age: Maximum tolerated age in seconds
    """

    def __init__(self, message: str, *, age: int, max_age: int):
        self.age = age
        self.max_age = max_age
        super().__init__(message)


class InvalidPriceError(MarketDataError):
    """Oracle reported a zero or negative price."""


# Authorization errors


class UnauthorizedError(AuthorizationError):
    """Caller is not allowed to perform the operation."""


class UnauthorizedCallerError(UnauthorizedError):
    """Caller is neither the owner nor an authorized caller of an engine."""


class UnauthorizedAccessError(UnauthorizedError):
    """Caller may not act on a position (e.g. cancel without maker rights)."""


# Lifecycle errors


class OptionNotActiveError(LifecycleError):
    """Position or engine config is inactive or unknown."""


class OptionAlreadyExecutedError(OptionNotActiveError):
    """Position has already been executed."""


class OptionOutOfMoneyError(OptionNotActiveError):
    """Option intrinsic value does not exceed the minimum floor."""


class OptionExpiredError(LifecycleError):
    """Option or position is past its expiration."""


class StopLossTriggeredError(LifecycleError):
    """Stop-loss predicate reports the position is unsafe to trade."""


class InsufficientAmountError(LifecycleError):
    """Offered amount is below the maker's minimum."""


class InsufficientPayoffError(LifecycleError):
    """Computed payoff is below the order's minimum payoff."""


class InvalidExtraDataError(LifecycleError):
    """Opaque adapter payload is empty or malformed."""


# Asset transfer errors


class InsufficientBalanceError(AssetTransferError):
    """Sender balance is lower than the transfer amount."""


class InsufficientAllowanceError(AssetTransferError):
    """Spender allowance is lower than the transfer amount (approve collateral first)."""


class InvalidTransferError(AssetTransferError):
    """Transfer has a null party or a non-positive amount."""


class ReentrantCallError(ProtectedOptionError):
    """A guarded entry point was re-entered before it completed."""
