"""
pricing_source.py - Price model for pool state projection

Models how the settlement price evolves from one upkeep to the next.

Two oracle shapes are supported, resolved once per projection:
- SpotOracle: the spot price read at projection start is reused every period
- SMAOracle: each period the spot price is pushed through a fixed-length
  simple moving average, reproducing what an SMA oracle would report

The oracle shape is decided by a structural check against SMAOracleView,
not by calling methods and catching failures.
"""

from dataclasses import replace
from typing import Tuple

from .core import (
    OracleView, SMAOracleView,
    SMAInfo, SpotOracle, SMAOracle, PriceInfo,
    CollaboratorReadFailure,
    read_int, read_uint,
)


def is_sma_oracle(oracle: OracleView) -> bool:
    """True if the oracle exposes the SMA capability. Never raises."""
    return isinstance(oracle, SMAOracleView)


def truncating_mean(values: Tuple[int, ...]) -> int:
    """Arithmetic mean, truncated toward zero like integer division on-chain."""
    total = sum(values)
    count = len(values)
    quotient = abs(total) // count
    return quotient if total >= 0 else -quotient


def load_sma_info(oracle: SMAOracleView) -> SMAInfo:
    """
    Read the SMA window from the oracle.

    The window holds the most recent min(period_count, num_periods - 1)
    observations, oldest first.

    Raises:
        CollaboratorReadFailure: if num_periods is 0 or a read is malformed
    """
    num_periods = read_uint(oracle.num_periods(), "SMA num_periods")
    if num_periods < 1:
        raise CollaboratorReadFailure("SMA oracle reports zero periods")
    period_count = read_uint(oracle.period_count(), "SMA period_count")

    length = min(period_count, num_periods - 1)
    first = period_count - length
    prices = tuple(
        read_int(oracle.prices(first + i), f"SMA price #{first + i}")
        for i in range(length)
    )
    return SMAInfo(prices=prices, num_periods=num_periods)


def advance_sma(sma: SMAInfo, spot_price: int) -> Tuple[int, SMAInfo]:
    """
    Push one spot observation through the moving average.

    Returns:
        (new index price, window for the next period)
    """
    window = sma.prices + (spot_price,)
    index_price = truncating_mean(window)
    keep = sma.num_periods - 1
    # Evict the oldest entries so at most num_periods - 1 remain
    next_prices = window[-keep:] if keep else ()
    return index_price, replace(sma, prices=next_prices)


def seed_price_info(oracle: OracleView, last_executed_price: int) -> PriceInfo:
    """
    Build the starting price model.

    The spot price is read once and reused for every projected period.
    """
    spot_price = read_int(oracle.get_price(), "oracle price")
    if is_sma_oracle(oracle):
        model = SMAOracle(spot_price=spot_price, sma=load_sma_info(oracle))
    else:
        model = SpotOracle(price=spot_price)
    return PriceInfo(
        index_price=spot_price,
        last_executed_price=last_executed_price,
        oracle=model,
    )


def advance_price(price_info: PriceInfo) -> PriceInfo:
    """
    Advance the price model by one period.

    Only index_price and the oracle model change; rolling
    last_executed_price forward is the caller's job once the period's value
    transfer has been applied.
    """
    model = price_info.oracle
    if isinstance(model, SpotOracle):
        return replace(price_info, index_price=model.price)

    index_price, sma = advance_sma(model.sma, model.spot_price)
    return replace(price_info, index_price=index_price, oracle=replace(model, sma=sma))
