"""
execution.py - Per-period projection stages

Pure functions applied once per settlement period, in this order:
1. apply_value_transfer: management fee and leveraged price move
2. execute_given_commit: the period's aggregated mints, burns and flips

Both take an immutable PoolInfo and return a new one.
"""

from __future__ import annotations
from dataclasses import replace

from .core import (
    PoolInfo, SideInfo, TotalCommitment, ReadOnlyPoolProps, PoolMath,
    checked_add, checked_sub,
)


def apply_value_transfer(
    pool_info: PoolInfo,
    old_price: int,
    new_price: int,
    props: ReadOnlyPoolProps,
    math: PoolMath,
) -> PoolInfo:
    """
    Redistribute settlement between the sides for one price move.

    Only settlement balances change; supply and pending burns pass through.

    Args:
        pool_info: ledger before this period's upkeep
        old_price: price the previous upkeep executed at
        new_price: price this upkeep executes at
        props: fee and leverage parameters
        math: fixed-point math strategy

    Returns:
        Ledger after value transfer, before commitments
    """
    long_balance, short_balance, _, _ = math.calculate_value_transfer(
        pool_info.long.settlement_balance,
        pool_info.short.settlement_balance,
        props.leverage_amount,
        old_price,
        new_price,
        props.management_fee,
    )
    return PoolInfo(
        long=replace(pool_info.long, settlement_balance=long_balance),
        short=replace(pool_info.short, settlement_balance=short_balance),
    )


def _settle_side(
    side: SideInfo,
    mint_settlement: int,
    flip_settlement_in: int,
    burn_pool_tokens: int,
    math: PoolMath,
    label: str,
) -> SideInfo:
    """
    Apply one side's mints and burns against its pre-mint state.

    Token conversions are priced off `side` as it was before any of this
    period's settlement moved, so a period's minters and burners trade at
    the same price.
    """
    total_mint_settlement = mint_settlement + flip_settlement_in
    minted_tokens = math.get_mint_amount(
        side.supply, total_mint_settlement, side.settlement_balance, side.pending_burn_pool_tokens
    )
    burned_settlement = math.get_withdraw_amount_on_burn(
        side.supply, burn_pool_tokens, side.settlement_balance, side.pending_burn_pool_tokens
    )

    pending_burn = checked_sub(
        side.pending_burn_pool_tokens, burn_pool_tokens, f"{label} pending burn pool tokens"
    )

    # Direct mints, then flip proceeds from the other side, then burns
    balance = checked_add(side.settlement_balance, mint_settlement, f"{label} settlement balance")
    balance = checked_add(balance, flip_settlement_in, f"{label} settlement balance")
    balance = checked_sub(balance, burned_settlement, f"{label} settlement balance")

    return SideInfo(
        supply=checked_add(side.supply, minted_tokens, f"{label} supply"),
        settlement_balance=balance,
        pending_burn_pool_tokens=pending_burn,
    )


def execute_given_commit(
    pool_info: PoolInfo,
    commitment: TotalCommitment,
    props: ReadOnlyPoolProps,
    math: PoolMath,
) -> PoolInfo:
    """
    Apply one period's aggregated commitment to the ledger.

    Flips are valued at the burning side's pre-mint price, net of burning
    and minting fees, and credited to the opposite side. Long burns (direct
    and flipped) leave the long pending-burn pool, likewise for shorts.

    Raises:
        ArithmeticFault: if the commitment burns more than is pending, or a
            balance would underflow
    """
    long_side = pool_info.long
    short_side = pool_info.short

    long_price = math.get_price(long_side.settlement_balance, long_side.effective_supply)
    short_price = math.get_price(short_side.settlement_balance, short_side.effective_supply)

    long_burn_short_mint_settlement = math.burn_then_instant_mint(
        commitment.long_burn_short_mint_pool_tokens,
        long_price,
        props.burning_fee,
        props.minting_fee,
    )
    short_burn_long_mint_settlement = math.burn_then_instant_mint(
        commitment.short_burn_long_mint_pool_tokens,
        short_price,
        props.burning_fee,
        props.minting_fee,
    )

    return PoolInfo(
        long=_settle_side(
            long_side,
            commitment.long_mint_settlement,
            short_burn_long_mint_settlement,
            commitment.total_long_burn_pool_tokens,
            math,
            "long",
        ),
        short=_settle_side(
            short_side,
            commitment.short_mint_settlement,
            long_burn_short_mint_settlement,
            commitment.total_short_burn_pool_tokens,
            math,
            "short",
        ),
    )
