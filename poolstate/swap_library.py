"""
swap_library.py - Reference fixed-point math for leveraged pools

Pure functions for the pool's money arithmetic:
- calculate_value_transfer: leveraged redistribution between long and short
- get_price: settlement value of one pool token
- get_mint_amount / get_withdraw_amount_on_burn: settlement <-> pool tokens
- burn_then_instant_mint: settlement generated by a burn->mint flip
- appropriate_update_interval_id: which period a commitment made now lands in

Fixed-point parameters are Decimal. Amounts are ints in the settlement
token's native decimals; conversions back to amounts truncate toward zero.

PoolSwapLibrary bundles these functions behind the PoolMath protocol so the
projection can take any math strategy.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Tuple

from .core import ONE, ArithmeticFault


# ============================================================================
# HELPERS
# ============================================================================

def to_uint(value: Decimal) -> int:
    """Convert a non-negative fixed-point value to an amount, truncating."""
    if value < 0:
        raise ArithmeticFault(f"Cannot convert negative value to amount: {value}")
    return int(value)


def multiply_decimal_by_uint(fraction: Decimal, amount: int) -> int:
    """trunc(fraction * amount)."""
    return to_uint(fraction * Decimal(amount))


# ============================================================================
# VALUE TRANSFER
# ============================================================================

def get_loss_multiplier(ratio: Decimal, leverage_amount: Decimal) -> Decimal:
    """
    Fraction of exposure the losing side pays for a price ratio.

    ratio = new_price / old_price. Rising prices cost the shorts
    1 - (1/ratio)^leverage, falling prices cost the longs 1 - ratio^leverage.
    Always in [0, 1).
    """
    if ratio >= ONE:
        base = ONE / ratio
    else:
        base = ratio
    return ONE - base ** leverage_amount


def calculate_value_transfer(
    long_balance: int,
    short_balance: int,
    leverage_amount: Decimal,
    old_price: int,
    new_price: int,
    fee: Decimal,
) -> Tuple[int, int, int, int]:
    """
    Apply one period's management fee and price move to the side balances.

    The fee is deducted from both sides first. The transfer is sized on the
    smaller side, so the losing side can never be driven below zero.

    A price pair with a non-positive price cannot be priced, so the whole
    step is skipped: balances come back unchanged and no fee is charged.

    Args:
        long_balance: long side settlement balance
        short_balance: short side settlement balance
        leverage_amount: pool leverage
        old_price: price at the previous upkeep
        new_price: price at this upkeep
        fee: management fee per period, as a fraction

    Returns:
        (new_long_balance, new_short_balance, long_fee_amount, short_fee_amount)
    """
    if old_price <= 0 or new_price <= 0:
        return long_balance, short_balance, 0, 0

    long_fee_amount = multiply_decimal_by_uint(fee, long_balance)
    short_fee_amount = multiply_decimal_by_uint(fee, short_balance)
    long_balance -= long_fee_amount
    short_balance -= short_fee_amount

    if new_price == old_price:
        return long_balance, short_balance, long_fee_amount, short_fee_amount

    ratio = Decimal(new_price) / Decimal(old_price)
    exposure = min(long_balance, short_balance)
    loss = multiply_decimal_by_uint(get_loss_multiplier(ratio, leverage_amount), exposure)

    if ratio > ONE:
        # Price went up: shorts pay longs
        long_balance += loss
        short_balance -= loss
    else:
        long_balance -= loss
        short_balance += loss

    return long_balance, short_balance, long_fee_amount, short_fee_amount


# ============================================================================
# PRICES AND CONVERSIONS
# ============================================================================

def get_price(side_balance: int, token_supply: int) -> Decimal:
    """Settlement value of one pool token. An empty side prices at 1."""
    if token_supply == 0:
        return ONE
    return Decimal(side_balance) / Decimal(token_supply)


def get_mint_amount(
    token_supply: int,
    amount_in: int,
    balance: int,
    pending_burn_pool_tokens: int,
) -> int:
    """
    Pool tokens minted for amount_in settlement tokens.

    Tokens pending burn still count towards supply, since their settlement
    value has not left the pool yet.
    """
    if amount_in == 0:
        return 0
    effective_supply = token_supply + pending_burn_pool_tokens
    if balance == 0 or effective_supply == 0:
        return amount_in
    return to_uint(Decimal(amount_in) * Decimal(effective_supply) / Decimal(balance))


def get_withdraw_amount_on_burn(
    token_supply: int,
    amount_in: int,
    balance: int,
    pending_burn_pool_tokens: int,
) -> int:
    """Settlement tokens released by burning amount_in pool tokens."""
    effective_supply = token_supply + pending_burn_pool_tokens
    if amount_in == 0 or balance == 0 or effective_supply == 0:
        return 0
    return to_uint(Decimal(balance) * Decimal(amount_in) / Decimal(effective_supply))


def burn_then_instant_mint(
    burn_pool_tokens: int,
    side_price: Decimal,
    burning_fee: Decimal,
    minting_fee: Decimal,
) -> int:
    """
    Settlement value a flip carries to the other side.

    The burnt tokens are valued at side_price, the burning fee is taken,
    then the minting fee is taken from what is left.
    """
    if burn_pool_tokens == 0:
        return 0
    settlement = multiply_decimal_by_uint(side_price, burn_pool_tokens)
    settlement -= multiply_decimal_by_uint(burning_fee, settlement)
    settlement -= multiply_decimal_by_uint(minting_fee, settlement)
    return settlement


# ============================================================================
# PERIOD ARITHMETIC
# ============================================================================

def is_before_front_running_interval(
    timestamp: int,
    last_price_timestamp: int,
    update_interval: int,
    front_running_interval: int,
) -> bool:
    """True if a commitment made at timestamp still lands in the current period."""
    return last_price_timestamp + update_interval - front_running_interval > timestamp


def appropriate_update_interval_id(
    timestamp: int,
    last_price_timestamp: int,
    front_running_interval: int,
    update_interval: int,
    current_update_interval_id: int,
) -> int:
    """
    Settlement-period id a commitment made at timestamp will execute in.

    Assumes front_running_interval is a multiple of update_interval when it
    is the larger of the two.

    Raises:
        ValueError: if update_interval is 0, or the front-running window spans
            several periods and last_price_timestamp is after timestamp
    """
    if update_interval == 0:
        raise ValueError("Update interval must be positive")

    if front_running_interval <= update_interval:
        if is_before_front_running_interval(
            timestamp, last_price_timestamp, update_interval, front_running_interval
        ):
            return current_update_interval_id
        return current_update_interval_id + 1

    # Front-running window spans several periods
    if last_price_timestamp > timestamp:
        raise ValueError(
            f"Last price timestamp {last_price_timestamp} is after {timestamp}"
        )
    minimum_time = timestamp + front_running_interval
    units_to_next_update_interval = (minimum_time - last_price_timestamp) // update_interval
    return current_update_interval_id + units_to_next_update_interval


# ============================================================================
# STRATEGY OBJECT
# ============================================================================

class PoolSwapLibrary:
    """Reference PoolMath implementation backed by the functions above."""

    calculate_value_transfer = staticmethod(calculate_value_transfer)
    get_price = staticmethod(get_price)
    get_mint_amount = staticmethod(get_mint_amount)
    get_withdraw_amount_on_burn = staticmethod(get_withdraw_amount_on_burn)
    burn_then_instant_mint = staticmethod(burn_then_instant_mint)
    appropriate_update_interval_id = staticmethod(appropriate_update_interval_id)

    def __repr__(self):
        return "PoolSwapLibrary()"
