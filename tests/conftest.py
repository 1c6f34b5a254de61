"""
conftest.py - Shared pytest fixtures for pool state tests

Provides:
- StubMath: a deterministic 1:1 math strategy that records its calls
- Pool factories (balanced spot pool, SMA pool)
- Helpers built on the real PoolSwapLibrary
"""

import pytest
from decimal import Decimal
from typing import Any, List, Tuple

from poolstate import (
    PoolStateHelper, PoolSwapLibrary, ReadOnlyPoolProps, TotalCommitment, ONE,
)

from tests.fake_view import FakePool, FakeCommitter, FakeOracle, FakeSMAOracle


# =============================================================================
# STUB MATH
# =============================================================================

class StubMath:
    """
    Deterministic PoolMath stub.

    - value transfer: fee = trunc(fee * balance); the loser pays
      |new - old| (capped at the smaller side)
    - pool tokens always trade 1:1 with settlement
    - commitments made now land two periods ahead

    Every call is appended to `calls` as (name, args).
    """

    def __init__(self, periods_ahead: int = 2):
        self.periods_ahead = periods_ahead
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def calculate_value_transfer(self, long_balance, short_balance, leverage_amount, old_price, new_price, fee):
        self.calls.append(("calculate_value_transfer", (long_balance, short_balance, old_price, new_price)))
        long_fee = int(fee * long_balance)
        short_fee = int(fee * short_balance)
        long_balance -= long_fee
        short_balance -= short_fee
        move = min(abs(new_price - old_price), long_balance, short_balance)
        if new_price > old_price:
            return long_balance + move, short_balance - move, long_fee, short_fee
        return long_balance - move, short_balance + move, long_fee, short_fee

    def get_price(self, side_balance, token_supply):
        self.calls.append(("get_price", (side_balance, token_supply)))
        return ONE

    def get_mint_amount(self, token_supply, amount_in, balance, pending_burn_pool_tokens):
        self.calls.append(("get_mint_amount", (token_supply, amount_in, balance, pending_burn_pool_tokens)))
        return amount_in

    def get_withdraw_amount_on_burn(self, token_supply, amount_in, balance, pending_burn_pool_tokens):
        self.calls.append(("get_withdraw_amount_on_burn", (token_supply, amount_in, balance, pending_burn_pool_tokens)))
        return amount_in

    def burn_then_instant_mint(self, burn_pool_tokens, side_price, burning_fee, minting_fee):
        self.calls.append(("burn_then_instant_mint", (burn_pool_tokens,)))
        return int(burn_pool_tokens * side_price)

    def appropriate_update_interval_id(self, timestamp, last_price_timestamp, front_running_interval,
                                       update_interval, current_update_interval_id):
        self.calls.append(("appropriate_update_interval_id", (timestamp,)))
        return current_update_interval_id + self.periods_ahead

    def called(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]


# =============================================================================
# POOL FACTORIES
# =============================================================================

def make_pool(
    balance: int = 1000,
    supply: int = 1000,
    price: int = 100,
    queue: List[TotalCommitment] = None,
    pending_long: int = 0,
    pending_short: int = 0,
    burning_fee: Decimal = Decimal("0"),
    minting_fee: Decimal = Decimal("0"),
    oracle=None,
    **pool_kwargs,
) -> FakePool:
    """Symmetric pool (same balance and supply on both sides) with an optional queue."""
    committer = FakeCommitter.with_queue(
        queue or [],
        pending_long_burn_pool_tokens=pending_long,
        pending_short_burn_pool_tokens=pending_short,
        burning_fee=burning_fee,
        minting_fee=minting_fee,
    )
    return FakePool(
        long_balance=balance,
        short_balance=balance,
        long_supply=supply,
        short_supply=supply,
        oracle=oracle if oracle is not None else FakeOracle(price),
        executed_price=price,
        committer=committer,
        **pool_kwargs,
    )


def zero_fee_props(leverage: Decimal = Decimal("1")) -> ReadOnlyPoolProps:
    return ReadOnlyPoolProps(
        burning_fee=Decimal("0"),
        minting_fee=Decimal("0"),
        management_fee=Decimal("0"),
        leverage_amount=leverage,
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def stub_math():
    return StubMath()


@pytest.fixture
def stub_helper(stub_math):
    return PoolStateHelper(math=stub_math)


@pytest.fixture
def helper():
    return PoolStateHelper()


@pytest.fixture
def library():
    return PoolSwapLibrary()


@pytest.fixture
def balanced_pool():
    """1000/1000 balances and supplies, price 100, three committed periods, empty queue."""
    return make_pool()


@pytest.fixture
def sma_pool():
    """Balanced pool priced by a 4-period SMA oracle with observations 100, 104, 108."""
    oracle = FakeSMAOracle([100, 104, 108], num_periods=4, price=112)
    return make_pool(oracle=oracle, price=100)
