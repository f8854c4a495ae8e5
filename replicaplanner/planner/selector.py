"""
Candidate selection for new replicas.

Strategies:
- Random: uniform choice over every eligible broker in the pool
- Explicit: operator-named broker, rejected if already a replica
"""

import random
from typing import Iterable, List, Optional, Sequence

from replicaplanner.errors import (
    EmptyPoolError,
    InvalidExplicitTargetError,
    NoCandidateError,
)
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)


class CandidateSelector:
    """
    Picks brokers to add to a replica set.

    One selector (and one random source) is shared by every partition of a
    run, so successive picks are independent draws.
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        """
        Initialize selector.

        Args:
            rng: Random source to draw from
            seed: Seed for a new random source (ignored if rng is given)
        """
        self.rng = rng if rng is not None else random.Random(seed)

    def pick(self, pool: BrokerPool, already_used: Iterable[int]) -> int:
        """
        Pick a random broker not already used.

        Args:
            pool: Broker pool to draw from
            already_used: Brokers that must not be picked

        Returns:
            Selected broker ID

        Raises:
            NoCandidateError: If every eligible broker is already used
        """
        used = frozenset(already_used)

        try:
            candidates = pool.candidates(used)
        except EmptyPoolError as e:
            raise NoCandidateError(str(e)) from e

        # Sorted so that a seeded source reproduces the same plan
        broker_id = self.rng.choice(sorted(candidates))

        logger.debug(
            "Picked candidate",
            broker_id=broker_id,
            num_candidates=len(candidates),
        )

        return broker_id

    def pick_explicit(self, broker_id: int, already_used: Iterable[int]) -> int:
        """
        Validate an operator-named broker.

        Args:
            broker_id: Requested broker
            already_used: Brokers already in the replica set

        Returns:
            The requested broker ID

        Raises:
            InvalidExplicitTargetError: If the broker is already used
        """
        used = list(already_used)

        if broker_id in used:
            raise InvalidExplicitTargetError(
                f"Replacement broker {broker_id} is already a replica in {used}"
            )

        return broker_id

    def shuffled(self, broker_ids: Sequence[int]) -> List[int]:
        """Return a randomly reordered copy of broker IDs."""
        result = list(broker_ids)
        self.rng.shuffle(result)
        return result
