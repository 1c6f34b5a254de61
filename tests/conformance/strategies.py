"""
Hypothesis strategies shared by the conformance suite.

pool_scenario() draws a pool ledger, oracle prices, fee parameters and a
commit queue that is consistent with the ledger: burns (direct and flipped)
never exceed what is pending on that side at the time they execute.
"""

from decimal import Decimal
from typing import Any, Dict, List

from hypothesis import strategies as st

from poolstate import TotalCommitment

from tests.fake_view import FakePool, FakeCommitter, FakeOracle


AMOUNT = st.integers(min_value=0, max_value=10 ** 24)
PRICE = st.integers(min_value=1, max_value=10 ** 9)
FEE = st.sampled_from([Decimal("0"), Decimal("0.0001"), Decimal("0.003"), Decimal("0.05")])
LEVERAGE = st.sampled_from([Decimal("1"), Decimal("2"), Decimal("3"), Decimal("5")])

# FakePool's default timing commits three periods
MAX_PERIODS = 3


@st.composite
def commit_queue(draw, pending_long: int, pending_short: int, length: int) -> List[TotalCommitment]:
    queue = []
    for _ in range(length):
        long_burn = draw(st.integers(min_value=0, max_value=pending_long))
        long_flip = draw(st.integers(min_value=0, max_value=pending_long - long_burn))
        pending_long -= long_burn + long_flip

        short_burn = draw(st.integers(min_value=0, max_value=pending_short))
        short_flip = draw(st.integers(min_value=0, max_value=pending_short - short_burn))
        pending_short -= short_burn + short_flip

        queue.append(TotalCommitment(
            long_mint_settlement=draw(AMOUNT),
            short_mint_settlement=draw(AMOUNT),
            long_burn_pool_tokens=long_burn,
            short_burn_pool_tokens=short_burn,
            long_burn_short_mint_pool_tokens=long_flip,
            short_burn_long_mint_pool_tokens=short_flip,
        ))
    return queue


@st.composite
def pool_scenario(draw, max_periods: int = MAX_PERIODS) -> Dict[str, Any]:
    """Keyword arguments for build_pool(), plus the queue and requested periods."""
    pending_long = draw(st.integers(min_value=0, max_value=10 ** 22))
    pending_short = draw(st.integers(min_value=0, max_value=10 ** 22))
    periods = draw(st.integers(min_value=1, max_value=max_periods))
    return {
        "long_balance": draw(AMOUNT),
        "short_balance": draw(AMOUNT),
        "long_supply": draw(AMOUNT),
        "short_supply": draw(AMOUNT),
        "pending_long": pending_long,
        "pending_short": pending_short,
        "executed_price": draw(PRICE),
        "spot_price": draw(PRICE),
        "leverage_amount": draw(LEVERAGE),
        "fee": draw(FEE),
        "burning_fee": draw(FEE),
        "minting_fee": draw(FEE),
        "queue": draw(commit_queue(pending_long, pending_short, periods)),
        "periods": periods,
    }


def build_pool(scenario: Dict[str, Any]) -> FakePool:
    committer = FakeCommitter.with_queue(
        scenario["queue"],
        pending_long_burn_pool_tokens=scenario["pending_long"],
        pending_short_burn_pool_tokens=scenario["pending_short"],
        burning_fee=scenario["burning_fee"],
        minting_fee=scenario["minting_fee"],
    )
    return FakePool(
        long_balance=scenario["long_balance"],
        short_balance=scenario["short_balance"],
        long_supply=scenario["long_supply"],
        short_supply=scenario["short_supply"],
        oracle=FakeOracle(scenario["spot_price"]),
        executed_price=scenario["executed_price"],
        committer=committer,
        leverage_amount=scenario["leverage_amount"],
        fee=scenario["fee"],
    )
