"""
poolstate - Forward state projection for leveraged long/short pools

Projects a pool's long/short supply, settlement balances and oracle price a
number of upkeeps into the future from its current balances, its queued
mint/burn commitments and its oracle, without changing anything on-chain.

Usage:
    from poolstate import PoolStateHelper

    helper = PoolStateHelper()
    periods = helper.full_commit_period(pool)
    state = helper.get_expected_state(pool, periods)

`pool` is any object implementing the PoolView protocol.
"""

# Core types
from .core import (
    PoolView,
    CommitterView,
    KeeperView,
    OracleView,
    SMAOracleView,
    TokenView,
    PoolMath,
    SideInfo,
    PoolInfo,
    TotalCommitment,
    ReadOnlyPoolProps,
    SMAInfo,
    SpotOracle,
    SMAOracle,
    OracleModel,
    PriceInfo,
    ExpectedPoolState,
    PoolStateError,
    InvalidPeriod,
    CollaboratorReadFailure,
    ArithmeticFault,
    checked_add,
    checked_sub,
    UINT256_MAX,
    ONE,
)

# Fixed-point math
from .swap_library import (
    PoolSwapLibrary,
    calculate_value_transfer,
    get_price,
    get_mint_amount,
    get_withdraw_amount_on_burn,
    burn_then_instant_mint,
    appropriate_update_interval_id,
)

# Projection stages
from .pricing_source import (
    is_sma_oracle,
    load_sma_info,
    advance_sma,
    seed_price_info,
    advance_price,
)
from .schedule import full_commit_period, get_commit_queue
from .execution import apply_value_transfer, execute_given_commit

# Orchestrator
from .helper import PoolStateHelper

__all__ = [
    # Protocols
    "PoolView",
    "CommitterView",
    "KeeperView",
    "OracleView",
    "SMAOracleView",
    "TokenView",
    "PoolMath",

    # State
    "SideInfo",
    "PoolInfo",
    "TotalCommitment",
    "ReadOnlyPoolProps",
    "SMAInfo",
    "SpotOracle",
    "SMAOracle",
    "OracleModel",
    "PriceInfo",
    "ExpectedPoolState",

    # Errors
    "PoolStateError",
    "InvalidPeriod",
    "CollaboratorReadFailure",
    "ArithmeticFault",

    # Arithmetic
    "checked_add",
    "checked_sub",
    "UINT256_MAX",
    "ONE",
    "PoolSwapLibrary",
    "calculate_value_transfer",
    "get_price",
    "get_mint_amount",
    "get_withdraw_amount_on_burn",
    "burn_then_instant_mint",
    "appropriate_update_interval_id",

    # Stages
    "is_sma_oracle",
    "load_sma_info",
    "advance_sma",
    "seed_price_info",
    "advance_price",
    "full_commit_period",
    "get_commit_queue",
    "apply_value_transfer",
    "execute_given_commit",

    # Orchestrator
    "PoolStateHelper",
]

__version__ = "0.1.0"
