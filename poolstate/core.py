"""
Core types and read-only interfaces for pool state projection.

This module provides the foundational data structures and protocols:
1. Protocols: read-only views of the pool, committer, keeper, oracle and tokens
2. Immutable data structures: SideInfo, PoolInfo, TotalCommitment, PriceInfo, ...
3. Exceptions: PoolStateError and its subclasses
4. Checked arithmetic and collaborator-read validation helpers

Nothing in this module (or anything built on it) mutates pool state.
Every projection stage receives immutable values and returns new ones.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import (
    Any, Dict, Optional, Protocol, Tuple, Union, runtime_checkable,
)


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Fixed-point fee, leverage and price-ratio arithmetic is done in Decimal.
# The global context is configured once at import.
#
# PRECONDITION: No other code should modify the global Decimal context.
# If thread-local contexts are needed, use decimal.localcontext().
#
_POOLSTATE_DECIMAL_CONTEXT = getcontext()
_POOLSTATE_DECIMAL_CONTEXT.prec = 50
_POOLSTATE_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

UINT256_MAX = 2 ** 256 - 1
INT256_MAX = 2 ** 255 - 1
INT256_MIN = -(2 ** 255)

ONE = Decimal("1")


# ============================================================================
# EXCEPTIONS
# ============================================================================

class PoolStateError(Exception):
    """Base exception for all projection errors."""
    pass


class InvalidPeriod(PoolStateError):
    """Raised when the requested projection depth is outside [0, full_commit_period]."""
    pass


class CollaboratorReadFailure(PoolStateError):
    """Raised when a collaborator returns malformed or inconsistent data."""
    pass


class ArithmeticFault(PoolStateError):
    """Raised on underflow or overflow while updating the projected ledger."""
    pass


# ============================================================================
# CHECKED ARITHMETIC
# ============================================================================

def checked_add(a: int, b: int, what: str = "value") -> int:
    """Add two unsigned amounts, failing on uint256 overflow."""
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticFault(f"{what} overflows uint256: {a} + {b}")
    return result


def checked_sub(a: int, b: int, what: str = "value") -> int:
    """Subtract two unsigned amounts, failing on underflow. Never clamps."""
    if b > a:
        raise ArithmeticFault(f"{what} underflows: {a} - {b}")
    return a - b


# ============================================================================
# COLLABORATOR READ VALIDATION
# ============================================================================

def read_uint(value: Any, what: str) -> int:
    """Validate an unsigned integer read from a collaborator."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise CollaboratorReadFailure(f"{what} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise CollaboratorReadFailure(f"{what} out of uint256 range: {value}")
    return value


def read_int(value: Any, what: str) -> int:
    """Validate a signed integer (e.g. an oracle price) read from a collaborator."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise CollaboratorReadFailure(f"{what} must be an int, got {type(value).__name__}")
    if value < INT256_MIN or value > INT256_MAX:
        raise CollaboratorReadFailure(f"{what} out of int256 range: {value}")
    return value


def read_fixed(value: Any, what: str) -> Decimal:
    """Validate a fixed-point parameter (fee, leverage) and return it as Decimal."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise CollaboratorReadFailure(
            f"{what} must be numeric, got {type(value).__name__}"
        )
    # Floats go through str to avoid binary representation noise
    value = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not value.is_finite():
        raise CollaboratorReadFailure(f"{what} must be finite, got {value}")
    if value < 0:
        raise CollaboratorReadFailure(f"{what} cannot be negative: {value}")
    return value


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TokenView(Protocol):
    """Read-only view of a pool token (long or short side)."""

    def total_supply(self) -> int:
        ...


@runtime_checkable
class OracleView(Protocol):
    """Read-only view of a price oracle."""

    def get_price(self) -> int:
        """Return the oracle's current price."""
        ...


@runtime_checkable
class SMAOracleView(OracleView, Protocol):
    """
    Read-only view of a simple-moving-average oracle.

    An oracle is treated as SMA-capable when it structurally satisfies this
    protocol. Oracles without these methods are spot oracles.
    """

    def num_periods(self) -> int:
        """Number of observations the average is taken over."""
        ...

    def period_count(self) -> int:
        """Total number of observations recorded so far."""
        ...

    def prices(self, index: int) -> int:
        """Observation by absolute index (0 is the oldest)."""
        ...


@runtime_checkable
class KeeperView(Protocol):
    """Read-only view of the keeper."""

    def executed_prices(self, pool_address: str) -> int:
        """Return the last price the keeper executed an upkeep at for a pool."""
        ...


@runtime_checkable
class CommitterView(Protocol):
    """Read-only view of the pool committer (the commitment queue)."""

    def update_interval_id(self) -> int:
        """Current settlement-period id."""
        ...

    def total_pool_commitments(self, update_interval_id: int) -> 'TotalCommitment':
        """Aggregated commitment for a settlement period."""
        ...

    def pending_long_burn_pool_tokens(self) -> int:
        ...

    def pending_short_burn_pool_tokens(self) -> int:
        ...

    def burning_fee(self) -> Decimal:
        ...

    def minting_fee(self) -> Decimal:
        ...


@runtime_checkable
class PoolView(Protocol):
    """
    Read-only view of a leveraged pool.

    Functions accepting a PoolView declare their read-only intent. All reads
    made during one projection are assumed to observe a single chain snapshot.
    """

    @property
    def current_time(self) -> int:
        """Chain timestamp (seconds) the view is observed at."""
        ...

    def address(self) -> str:
        ...

    def pool_tokens(self) -> Tuple[TokenView, TokenView]:
        """Return (long_token, short_token)."""
        ...

    def long_balance(self) -> int:
        ...

    def short_balance(self) -> int:
        ...

    def leverage_amount(self) -> Decimal:
        ...

    def fee(self) -> Decimal:
        """Management fee charged per settlement period, as a fraction."""
        ...

    def last_price_timestamp(self) -> int:
        ...

    def front_running_interval(self) -> int:
        ...

    def update_interval(self) -> int:
        ...

    def oracle(self) -> OracleView:
        ...

    def keeper(self) -> KeeperView:
        ...

    def pool_committer(self) -> CommitterView:
        ...

    def settlement_token_decimals(self) -> int:
        ...


@runtime_checkable
class PoolMath(Protocol):
    """
    Fixed-point math strategy used by the projection stages.

    PoolSwapLibrary is the reference implementation. Any object with these
    methods can be injected, which lets the fold be tested against simple
    deterministic stubs.
    """

    def calculate_value_transfer(
        self,
        long_balance: int,
        short_balance: int,
        leverage_amount: Decimal,
        old_price: int,
        new_price: int,
        fee: Decimal,
    ) -> Tuple[int, int, int, int]:
        ...

    def get_price(self, side_balance: int, token_supply: int) -> Decimal:
        ...

    def get_mint_amount(
        self, token_supply: int, amount_in: int, balance: int, pending_burn_pool_tokens: int
    ) -> int:
        ...

    def get_withdraw_amount_on_burn(
        self, token_supply: int, amount_in: int, balance: int, pending_burn_pool_tokens: int
    ) -> int:
        ...

    def burn_then_instant_mint(
        self, burn_pool_tokens: int, side_price: Decimal, burning_fee: Decimal, minting_fee: Decimal
    ) -> int:
        ...

    def appropriate_update_interval_id(
        self,
        timestamp: int,
        last_price_timestamp: int,
        front_running_interval: int,
        update_interval: int,
        current_update_interval_id: int,
    ) -> int:
        ...


# ============================================================================
# LEDGER STATE
# ============================================================================

@dataclass(frozen=True, slots=True)
class SideInfo:
    """
    One side (long or short) of the pool ledger.

    Attributes:
        supply: Pool token total supply (excludes tokens already queued to burn)
        settlement_balance: Settlement tokens backing this side
        pending_burn_pool_tokens: Tokens committed to burn but not yet executed
    """
    supply: int
    settlement_balance: int
    pending_burn_pool_tokens: int

    def __post_init__(self):
        for name in ("supply", "settlement_balance", "pending_burn_pool_tokens"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ArithmeticFault(
                    f"SideInfo.{name} must be an int amount, got {type(value).__name__}"
                )
            if value < 0:
                raise ArithmeticFault(f"SideInfo.{name} cannot be negative: {value}")

    @property
    def effective_supply(self) -> int:
        """Supply used for pricing: live supply plus tokens pending burn."""
        return self.supply + self.pending_burn_pool_tokens


@dataclass(frozen=True, slots=True)
class PoolInfo:
    """Full ledger snapshot at one point of the projection."""
    long: SideInfo
    short: SideInfo

    @property
    def total_settlement_balance(self) -> int:
        return self.long.settlement_balance + self.short.settlement_balance


# ============================================================================
# COMMITMENTS
# ============================================================================

_COMMITMENT_AMOUNT_FIELDS = (
    "long_mint_settlement",
    "short_mint_settlement",
    "long_burn_pool_tokens",
    "short_burn_pool_tokens",
    "long_burn_short_mint_pool_tokens",
    "short_burn_long_mint_pool_tokens",
)


@dataclass(frozen=True, slots=True)
class TotalCommitment:
    """
    Aggregated commitments of all users for one settlement period.

    Mint amounts are in settlement tokens, burn and flip amounts in pool tokens.
    A "flip" (long_burn_short_mint / short_burn_long_mint) burns tokens on one
    side and mints the proceeds on the other within the same period.

    Values come from the committer, so malformed fields raise
    CollaboratorReadFailure.
    """
    long_mint_settlement: int = 0
    short_mint_settlement: int = 0
    long_burn_pool_tokens: int = 0
    short_burn_pool_tokens: int = 0
    long_burn_short_mint_pool_tokens: int = 0
    short_burn_long_mint_pool_tokens: int = 0
    update_interval_id: int = 0

    def __post_init__(self):
        for name in _COMMITMENT_AMOUNT_FIELDS + ("update_interval_id",):
            read_uint(getattr(self, name), f"TotalCommitment.{name}")

    @property
    def total_long_burn_pool_tokens(self) -> int:
        """Long tokens leaving the pending-burn pool: direct burns plus flips."""
        return self.long_burn_pool_tokens + self.long_burn_short_mint_pool_tokens

    @property
    def total_short_burn_pool_tokens(self) -> int:
        return self.short_burn_pool_tokens + self.short_burn_long_mint_pool_tokens

    @property
    def total_mint_settlement(self) -> int:
        return self.long_mint_settlement + self.short_mint_settlement

    def is_empty(self) -> bool:
        return all(getattr(self, name) == 0 for name in _COMMITMENT_AMOUNT_FIELDS)


# ============================================================================
# FEES, PRICES AND ORACLE MODELS
# ============================================================================

@dataclass(frozen=True, slots=True)
class ReadOnlyPoolProps:
    """
    Fee and leverage parameters, sampled once per projection.

    Fees may change on-chain between periods; the projection holds them
    constant for its whole window.
    """
    burning_fee: Decimal
    minting_fee: Decimal
    management_fee: Decimal
    leverage_amount: Decimal


@dataclass(frozen=True, slots=True)
class SMAInfo:
    """
    Sliding window of SMA observations.

    Holds at most num_periods - 1 prices, oldest first. The next spot price
    completes the window when the average is taken.
    """
    prices: Tuple[int, ...]
    num_periods: int

    def __post_init__(self):
        if self.num_periods < 1:
            raise ValueError(f"SMA num_periods must be >= 1, got {self.num_periods}")
        if len(self.prices) > self.num_periods - 1:
            raise ValueError(
                f"SMA window holds {len(self.prices)} prices, max is {self.num_periods - 1}"
            )


@dataclass(frozen=True, slots=True)
class SpotOracle:
    """Spot oracle model: the price read at projection start is held constant."""
    price: int


@dataclass(frozen=True, slots=True)
class SMAOracle:
    """SMA oracle model: the spot price feeds a sliding average each period."""
    spot_price: int
    sma: SMAInfo


OracleModel = Union[SpotOracle, SMAOracle]


@dataclass(frozen=True, slots=True)
class PriceInfo:
    """Price model threaded through the projection."""
    index_price: int
    last_executed_price: int
    oracle: OracleModel

    @property
    def is_sma(self) -> bool:
        return isinstance(self.oracle, SMAOracle)


# ============================================================================
# OUTPUT
# ============================================================================

@dataclass(frozen=True, slots=True)
class ExpectedPoolState:
    """Projected pool state after a number of upkeeps."""
    cumulative_pending_mint_settlement: int
    remaining_pending_long_burn_tokens: int
    remaining_pending_short_burn_tokens: int
    long_supply: int
    long_balance: int
    short_supply: int
    short_balance: int
    oracle_price: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "cumulative_pending_mint_settlement": self.cumulative_pending_mint_settlement,
            "remaining_pending_long_burn_tokens": self.remaining_pending_long_burn_tokens,
            "remaining_pending_short_burn_tokens": self.remaining_pending_short_burn_tokens,
            "long_supply": self.long_supply,
            "long_balance": self.long_balance,
            "short_supply": self.short_supply,
            "short_balance": self.short_balance,
            "oracle_price": self.oracle_price,
        }

    @classmethod
    def from_pool_info(
        cls,
        pool_info: PoolInfo,
        oracle_price: int,
        cumulative_pending_mint_settlement: int = 0,
    ) -> ExpectedPoolState:
        return cls(
            cumulative_pending_mint_settlement=cumulative_pending_mint_settlement,
            remaining_pending_long_burn_tokens=pool_info.long.pending_burn_pool_tokens,
            remaining_pending_short_burn_tokens=pool_info.short.pending_burn_pool_tokens,
            long_supply=pool_info.long.supply,
            long_balance=pool_info.long.settlement_balance,
            short_supply=pool_info.short.supply,
            short_balance=pool_info.short.settlement_balance,
            oracle_price=oracle_price,
        )


def format_amount(amount: int, decimals: Optional[int]) -> str:
    """Render a native-decimals amount in whole settlement-token units."""
    if not decimals:
        return str(amount)
    return f"{Decimal(amount).scaleb(-decimals):f}"
