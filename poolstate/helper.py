"""
helper.py - Forward projection of pool state

PoolStateHelper answers "what will this pool look like after the next N
upkeeps?" by folding the queued commitments over the current ledger:

    Seeding -> Iterating(i = 0..N-1) -> Done

Each iteration:
1. Advance the price model one period
2. Apply value transfer for (last executed price, new index price)
3. Execute the period's aggregated commitment
4. Roll the last executed price forward and accumulate pending mints

Reads go through the PoolView protocol family and nothing is ever written.
Fees are sampled once per projection and keeper fees are not modelled.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterator, List, Optional, Tuple

from .core import (
    PoolView, PoolMath,
    SideInfo, PoolInfo, TotalCommitment, ReadOnlyPoolProps, PriceInfo,
    ExpectedPoolState,
    InvalidPeriod,
    read_uint, read_int, read_fixed, format_amount,
)
from .execution import apply_value_transfer, execute_given_commit
from .pricing_source import seed_price_info, advance_price
from .schedule import full_commit_period, get_commit_queue
from .swap_library import PoolSwapLibrary


class PoolStateHelper:
    """
    Read-only projector of a pool's future state.

    Holds no pool state between calls: every projection builds its own
    ledger and price model from fresh reads and discards them on return.

    Example:
        helper = PoolStateHelper()
        depth = helper.full_commit_period(pool)
        state = helper.get_expected_state(pool, depth)
        print(state.long_balance, state.short_balance)
    """

    def __init__(self, math: Optional[PoolMath] = None, verbose: bool = False):
        """
        Create a helper.

        Args:
            math: Fixed-point math strategy (default: PoolSwapLibrary)
            verbose: Print each projected period (default: False)
        """
        self.math: PoolMath = math if math is not None else PoolSwapLibrary()
        self.verbose = verbose

    def __repr__(self):
        return f"PoolStateHelper(math={self.math!r}, verbose={self.verbose})"

    # ========================================================================
    # READERS
    # ========================================================================

    def full_commit_period(self, pool: PoolView) -> int:
        """Maximum number of periods a projection of this pool may cover."""
        return full_commit_period(pool, self.math)

    def get_commit_queue(self, pool: PoolView, periods: int) -> Tuple[TotalCommitment, ...]:
        """Aggregated commitments of the next `periods` periods, in execution order."""
        return get_commit_queue(pool.pool_committer(), periods)

    def get_pool_info(self, pool: PoolView) -> PoolInfo:
        """Current ledger: supplies, settlement balances and pending burns."""
        committer = pool.pool_committer()
        long_token, short_token = pool.pool_tokens()
        return PoolInfo(
            long=SideInfo(
                supply=read_uint(long_token.total_supply(), "long token supply"),
                settlement_balance=read_uint(pool.long_balance(), "long balance"),
                pending_burn_pool_tokens=read_uint(
                    committer.pending_long_burn_pool_tokens(), "pending long burn pool tokens"
                ),
            ),
            short=SideInfo(
                supply=read_uint(short_token.total_supply(), "short token supply"),
                settlement_balance=read_uint(pool.short_balance(), "short balance"),
                pending_burn_pool_tokens=read_uint(
                    committer.pending_short_burn_pool_tokens(), "pending short burn pool tokens"
                ),
            ),
        )

    def get_read_only_props(self, pool: PoolView) -> ReadOnlyPoolProps:
        """Fee and leverage parameters as currently configured."""
        committer = pool.pool_committer()
        return ReadOnlyPoolProps(
            burning_fee=read_fixed(committer.burning_fee(), "burning fee"),
            minting_fee=read_fixed(committer.minting_fee(), "minting fee"),
            management_fee=read_fixed(pool.fee(), "management fee"),
            leverage_amount=read_fixed(pool.leverage_amount(), "leverage amount"),
        )

    def get_price_info(self, pool: PoolView) -> PriceInfo:
        """Starting price model: keeper's last executed price plus the oracle shape."""
        last_executed_price = read_int(
            pool.keeper().executed_prices(pool.address()), "last executed price"
        )
        return seed_price_info(pool.oracle(), last_executed_price)

    # ========================================================================
    # PROJECTION
    # ========================================================================

    def get_expected_state(self, pool: PoolView, periods: int) -> ExpectedPoolState:
        """
        Project the pool `periods` upkeeps into the future.

        With periods == 0 the current state is returned as-is, with the live
        oracle price and no pending mint settlement.

        Raises:
            InvalidPeriod: if periods is negative or exceeds full_commit_period(pool)
            CollaboratorReadFailure: if a collaborator returns malformed data
            ArithmeticFault: if the queue is inconsistent with the ledger
        """
        self._check_periods(pool, periods)
        if periods == 0:
            return self._current_state(pool)

        state = None
        for state in self._project(pool, periods):
            pass
        return state

    def get_expected_states(self, pool: PoolView, periods: int) -> List[ExpectedPoolState]:
        """
        Project the pool and keep every intermediate state.

        Element i is the state after i + 1 upkeeps, so the last element
        equals get_expected_state(pool, periods). Empty for periods == 0.

        Raises:
            InvalidPeriod: if periods is negative or exceeds full_commit_period(pool)
        """
        self._check_periods(pool, periods)
        if periods == 0:
            return []
        return list(self._project(pool, periods))

    def _check_periods(self, pool: PoolView, periods: int) -> None:
        if isinstance(periods, bool) or not isinstance(periods, int):
            raise InvalidPeriod(f"Periods must be an int, got {type(periods).__name__}")
        if periods < 0:
            raise InvalidPeriod(f"Periods cannot be negative: {periods}")
        max_periods = self.full_commit_period(pool)
        if periods > max_periods:
            raise InvalidPeriod(
                f"Cannot project {periods} periods, at most {max_periods} are committed"
            )

    def _current_state(self, pool: PoolView) -> ExpectedPoolState:
        oracle_price = read_int(pool.oracle().get_price(), "oracle price")
        return ExpectedPoolState.from_pool_info(self.get_pool_info(pool), oracle_price)

    def _project(self, pool: PoolView, periods: int) -> Iterator[ExpectedPoolState]:
        """Fold the commit queue over the ledger, yielding the state after each period."""
        # Seeding
        queue = self.get_commit_queue(pool, periods)
        pool_info = self.get_pool_info(pool)
        props = self.get_read_only_props(pool)
        price_info = self.get_price_info(pool)
        cumulative_mint_settlement = 0

        decimals = None
        if self.verbose:
            decimals = read_uint(pool.settlement_token_decimals(), "settlement token decimals")
            print(f"Projecting {pool.address()} over {periods} period(s) "
                  f"[{'SMA' if price_info.is_sma else 'spot'} oracle]")

        # Iterating
        for i, commitment in enumerate(queue):
            next_price_info = advance_price(price_info)
            pool_info = apply_value_transfer(
                pool_info,
                price_info.last_executed_price,
                next_price_info.index_price,
                props,
                self.math,
            )
            pool_info = execute_given_commit(pool_info, commitment, props, self.math)
            price_info = replace(next_price_info, last_executed_price=next_price_info.index_price)
            cumulative_mint_settlement += commitment.total_mint_settlement

            state = ExpectedPoolState.from_pool_info(
                pool_info, price_info.index_price, cumulative_mint_settlement
            )
            if self.verbose:
                self._print_period(i, state, decimals)
            yield state

        # Done
        if self.verbose:
            print(f"Projected {len(queue)} period(s), "
                  f"total pending mints={format_amount(cumulative_mint_settlement, decimals)}")

    def _print_period(self, index: int, state: ExpectedPoolState, decimals: Optional[int]) -> None:
        print(f"  period {index + 1}: price={state.oracle_price} "
              f"long={format_amount(state.long_balance, decimals)} "
              f"(supply {state.long_supply}) "
              f"short={format_amount(state.short_balance, decimals)} "
              f"(supply {state.short_supply}) "
              f"pending mints={format_amount(state.cumulative_pending_mint_settlement, decimals)}")
