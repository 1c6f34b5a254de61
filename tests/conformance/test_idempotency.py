"""
Idempotency Conformance Tests

INVARIANT: Projection is read-only.

    ∀ pool P, periods n:
        get_expected_state(P, n) = get_expected_state(P, n)
        P after the call = P before the call

Repeating a call with no intervening change yields identical output.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from poolstate import PoolStateHelper

from tests.conftest import make_pool
from tests.conformance.strategies import pool_scenario, build_pool


def _observe(pool):
    """Everything a projection reads, via the public views."""
    committer = pool.pool_committer()
    long_token, short_token = pool.pool_tokens()
    return (
        pool.long_balance(),
        pool.short_balance(),
        long_token.total_supply(),
        short_token.total_supply(),
        committer.update_interval_id(),
        committer.pending_long_burn_pool_tokens(),
        committer.pending_short_burn_pool_tokens(),
        tuple(committer.total_pool_commitments(committer.update_interval_id() + i) for i in range(3)),
        pool.oracle().get_price(),
    )


class TestIdempotencyProperties:

    @given(pool_scenario())
    @settings(max_examples=75, deadline=None)
    def test_repeated_projection_is_identical(self, scenario):
        pool = build_pool(scenario)
        helper = PoolStateHelper()
        first = helper.get_expected_state(pool, scenario["periods"])
        second = helper.get_expected_state(pool, scenario["periods"])
        assert first == second

    @given(pool_scenario())
    @settings(max_examples=75, deadline=None)
    def test_projection_does_not_change_the_pool(self, scenario):
        pool = build_pool(scenario)
        before = _observe(pool)
        PoolStateHelper().get_expected_states(pool, scenario["periods"])
        assert _observe(pool) == before

    @given(st.integers(min_value=1, max_value=5))
    @settings(max_examples=20)
    def test_zero_period_snapshot_is_stable(self, num_repeats):
        pool = make_pool(pending_long=10, pending_short=20)
        helper = PoolStateHelper()
        results = [helper.get_expected_state(pool, 0) for _ in range(num_repeats + 1)]
        assert all(result == results[0] for result in results)
