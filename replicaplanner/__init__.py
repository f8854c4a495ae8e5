"""
Replica planner - partition reassignment plans for Kafka-like clusters.

This package computes new replica placements from the current cluster layout
and an operator intent:
- Scaling the replication factor of a topic up or down
- Decommissioning a broker (random or explicit replacement)

Plans are emitted in the kafka-reassign-partitions JSON format; applying
them is left to the cluster's own tooling.
"""

__version__ = "0.1.0"
