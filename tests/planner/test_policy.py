"""Tests for reassignment policies."""

import random

import pytest

from replicaplanner.errors import (
    ConfigurationError,
    InsufficientBrokersError,
    InvalidExplicitTargetError,
    NoCandidateError,
    NoReplacementFoundError,
    OutOfRangeError,
)
from replicaplanner.planner.policy import DecommissionPolicy, ScalePolicy
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.planner.replicas import ReplicaSet
from replicaplanner.planner.selector import CandidateSelector


@pytest.fixture
def selector():
    """Create seeded selector."""
    return CandidateSelector(rng=random.Random(1234))


class TestScalePolicy:
    """Test ScalePolicy."""

    def test_scale_up_single_replica(self, selector):
        """Test [5] scaled to 3 over 0..5."""
        policy = ScalePolicy(3, BrokerPool(0, 5), selector)

        new_replicas = policy.reassign(ReplicaSet([5]))

        assert len(new_replicas) == 3
        assert new_replicas.leader == 5
        assert set(new_replicas.followers) <= {0, 1, 2, 3, 4}
        assert len(set(new_replicas)) == 3

    def test_scale_up_keeps_existing_order(self, selector):
        """Test existing replicas keep their positions."""
        policy = ScalePolicy(5, BrokerPool(0, 8), selector)

        new_replicas = policy.reassign(ReplicaSet([4, 7, 1]))

        assert new_replicas.brokers[:3] == (4, 7, 1)
        assert len(new_replicas) == 5

    def test_scale_up_respects_exclusions(self, selector):
        """Test excluded brokers are never added."""
        pool = BrokerPool(0, 5, excluded=frozenset({2, 3}))
        policy = ScalePolicy(4, pool, selector)

        for _ in range(50):
            new_replicas = policy.reassign(ReplicaSet([0]))
            assert not {2, 3} & set(new_replicas)
            assert len(new_replicas) == 4

    def test_scale_up_beyond_pool(self, selector):
        """Test [1,2,3] scaled to 5 over 0..3 is rejected."""
        policy = ScalePolicy(5, BrokerPool(0, 3), selector)

        with pytest.raises(NoCandidateError) as exc_info:
            policy.reassign(ReplicaSet([1, 2, 3]))

        assert isinstance(exc_info.value, OutOfRangeError)
        assert isinstance(exc_info.value, InsufficientBrokersError)

    def test_same_size_is_noop(self, selector):
        """Test scaling to current size returns replicas unchanged."""
        policy = ScalePolicy(3, BrokerPool(0, 8), selector)
        replicas = ReplicaSet([2, 0, 6])

        assert policy.reassign(replicas) == replicas

    def test_zero_is_deletion(self, selector):
        """Test scaling to zero yields deletion sentinel."""
        policy = ScalePolicy(0, BrokerPool(0, 8), selector)

        assert policy.reassign(ReplicaSet([1, 2])).is_deletion

    def test_negative_out_of_range(self, selector):
        """Test negative replication factor is rejected."""
        policy = ScalePolicy(-1, BrokerPool(0, 8), selector)

        with pytest.raises(OutOfRangeError):
            policy.reassign(ReplicaSet([1, 2]))

    def test_scale_down_keeps_leader(self, selector):
        """Test leader survives scale down."""
        policy = ScalePolicy(2, BrokerPool(0, 8), selector)
        replicas = ReplicaSet([3, 1, 2, 5])

        for _ in range(50):
            new_replicas = policy.reassign(replicas)
            assert new_replicas.leader == 3
            assert len(new_replicas) == 2
            assert set(new_replicas.followers) <= {1, 2, 5}

    def test_scale_down_to_one(self, selector):
        """Test scale down to leader only."""
        policy = ScalePolicy(1, BrokerPool(0, 8), selector)

        assert policy.reassign(ReplicaSet([6, 1, 2])) == [6]

    def test_scale_down_is_randomized(self, selector):
        """Test every follower is dropped at some point."""
        policy = ScalePolicy(2, BrokerPool(0, 8), selector)
        replicas = ReplicaSet([0, 1, 2, 3])

        kept = {policy.reassign(replicas).followers[0] for _ in range(200)}

        assert kept == {1, 2, 3}

    def test_scale_down_keeps_relative_order(self, selector):
        """Test retained followers keep their order."""
        policy = ScalePolicy(3, BrokerPool(0, 8), selector)
        replicas = ReplicaSet([0, 1, 2, 3, 4])

        for _ in range(50):
            followers = list(policy.reassign(replicas).followers)
            assert followers == sorted(followers)

    def test_scale_down_drops_excluded_first(self, selector):
        """Test excluded followers are dropped before others."""
        pool = BrokerPool(0, 8, excluded=frozenset({2}))
        policy = ScalePolicy(3, pool, selector)

        for _ in range(50):
            assert 2 not in policy.reassign(ReplicaSet([0, 1, 2, 3]))


class TestDecommissionPolicy:
    """Test DecommissionPolicy."""

    def test_explicit_replacement(self, selector):
        """Test [3,1,2] decommission 1 with explicit 0."""
        policy = DecommissionPolicy(
            subject=1,
            selector=selector,
            explicit_replacement=0,
        )

        assert policy.reassign(ReplicaSet([3, 1, 2])) == [3, 0, 2]

    def test_random_replacement(self, selector):
        """Test random replacement takes the subject's position."""
        policy = DecommissionPolicy(subject=1, selector=selector, pool=BrokerPool(0, 4))

        for _ in range(50):
            new_replicas = policy.reassign(ReplicaSet([3, 1, 2]))
            assert new_replicas.leader == 3
            assert new_replicas[2] == 2
            assert new_replicas[1] in {0, 4}

    def test_leader_replaced_in_place(self, selector):
        """Test decommissioned leader gets a new leader designee."""
        policy = DecommissionPolicy(subject=3, selector=selector, explicit_replacement=7)

        assert policy.reassign(ReplicaSet([3, 1, 2])) == [7, 1, 2]

    def test_subject_not_replica(self, selector):
        """Test partitions without the subject are skipped."""
        policy = DecommissionPolicy(subject=9, selector=selector, pool=BrokerPool(0, 9))

        assert policy.reassign(ReplicaSet([3, 1, 2])) is None

    def test_leader_only_skips_followers(self, selector):
        """Test leader-only mode ignores follower replicas."""
        policy = DecommissionPolicy(
            subject=1,
            selector=selector,
            pool=BrokerPool(0, 9),
            leader_only=True,
        )

        assert policy.reassign(ReplicaSet([3, 1, 2])) is None
        assert 1 not in policy.reassign(ReplicaSet([1, 3, 2]))

    def test_subject_never_picked(self, selector):
        """Test subject is not drawn as its own replacement."""
        policy = DecommissionPolicy(subject=1, selector=selector, pool=BrokerPool(0, 2))

        for _ in range(50):
            assert policy.reassign(ReplicaSet([1])) in ([0], [2])

    def test_exclusions_respected(self, selector):
        """Test excluded brokers are never picked."""
        policy = DecommissionPolicy(
            subject=1,
            selector=selector,
            pool=BrokerPool(0, 5),
            exclude={4, 5},
        )

        for _ in range(50):
            assert policy.reassign(ReplicaSet([1, 2])).leader in {0, 3}

    def test_no_replacement(self, selector):
        """Test single-broker cluster cannot decommission."""
        policy = DecommissionPolicy(subject=0, selector=selector, pool=BrokerPool(0, 1))

        with pytest.raises(NoReplacementFoundError):
            policy.reassign(ReplicaSet([0, 1]))

    def test_explicit_already_replica(self, selector):
        """Test explicit target already in replicas is rejected."""
        policy = DecommissionPolicy(subject=1, selector=selector, explicit_replacement=2)

        with pytest.raises(InvalidExplicitTargetError):
            policy.reassign(ReplicaSet([3, 1, 2]))

    def test_explicit_is_subject(self, selector):
        """Test replacing a broker with itself is rejected up front."""
        with pytest.raises(InvalidExplicitTargetError):
            DecommissionPolicy(subject=1, selector=selector, explicit_replacement=1)

    def test_explicit_excluded(self, selector):
        """Test excluded explicit target is rejected up front."""
        with pytest.raises(InvalidExplicitTargetError):
            DecommissionPolicy(
                subject=1,
                selector=selector,
                explicit_replacement=5,
                exclude={5},
            )

    def test_modes_mutually_exclusive(self, selector):
        """Test pool and explicit replacement cannot be combined."""
        with pytest.raises(ConfigurationError):
            DecommissionPolicy(
                subject=1,
                selector=selector,
                pool=BrokerPool(0, 4),
                explicit_replacement=0,
            )

        with pytest.raises(ConfigurationError):
            DecommissionPolicy(subject=1, selector=selector)

    def test_fatal_errors(self, selector):
        """Test decommission failures abort the plan."""
        policy = DecommissionPolicy(subject=1, selector=selector, explicit_replacement=0)
        scale = ScalePolicy(2, BrokerPool(0, 3), selector)

        assert policy.is_fatal(NoReplacementFoundError("x"))
        assert policy.is_fatal(InvalidExplicitTargetError("x"))
        assert not scale.is_fatal(NoCandidateError("x"))
