"""
schedule.py - Settlement-period scheduling reads

Two readers that bound and feed a projection:
- full_commit_period: how many periods execute before or at the end of the
  current front-running window (the maximum projection depth)
- get_commit_queue: the aggregated commitments of the next N periods, in
  the order they will execute
"""

from __future__ import annotations
from typing import Tuple

from .core import (
    PoolView, CommitterView, PoolMath, TotalCommitment,
    CollaboratorReadFailure,
    read_uint,
)


def full_commit_period(pool: PoolView, math: PoolMath) -> int:
    """
    Number of committed periods, inclusive of the current one, that will
    execute within the present front-running window.

    Assumes the front-running interval is a multiple of the update interval
    whenever it is longer. This is not checked.

    A last price timestamp ahead of now only matters when the
    front-running window spans several periods.

    Raises:
        CollaboratorReadFailure: on malformed or inconsistent timestamps
    """
    committer = pool.pool_committer()
    now = read_uint(pool.current_time, "current time")
    last_price_timestamp = read_uint(pool.last_price_timestamp(), "last price timestamp")
    front_running_interval = read_uint(pool.front_running_interval(), "front running interval")
    update_interval = read_uint(pool.update_interval(), "update interval")
    current_id = read_uint(committer.update_interval_id(), "update interval id")

    if front_running_interval > update_interval and last_price_timestamp > now:
        raise CollaboratorReadFailure(
            f"Last price timestamp {last_price_timestamp} is in the future (now={now})"
        )
    if update_interval == 0:
        raise CollaboratorReadFailure("Pool reports a zero update interval")

    appropriate_id = math.appropriate_update_interval_id(
        now, last_price_timestamp, front_running_interval, update_interval, current_id
    )
    return appropriate_id - current_id + 1


def get_commit_queue(committer: CommitterView, periods: int) -> Tuple[TotalCommitment, ...]:
    """
    Read the aggregated commitments for the next `periods` settlement periods.

    Element i is the commitment for period current_id + i and must be applied
    strictly before element i + 1.

    Raises:
        CollaboratorReadFailure: if the committer returns something other
            than a TotalCommitment
    """
    current_id = read_uint(committer.update_interval_id(), "update interval id")
    queue = []
    for i in range(periods):
        commitment = committer.total_pool_commitments(current_id + i)
        if not isinstance(commitment, TotalCommitment):
            raise CollaboratorReadFailure(
                f"Commitment for period {current_id + i} must be TotalCommitment, "
                f"got {type(commitment).__name__}"
            )
        queue.append(commitment)
    return tuple(queue)
