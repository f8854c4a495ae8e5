"""
Cluster metadata sources.

Supplies the current partition, leader and replica layout to the planner:
- KafkaTopicsSource: runs the kafka-topics CLI shipped with Kafka
- DescribeFileSource: reads saved `kafka-topics --describe` output
- StaticMetadataSource: in-memory partition list
"""

import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from replicaplanner.errors import ConfigurationError, MetadataSourceError
from replicaplanner.metadata.describe import parse_describe_output
from replicaplanner.metadata.partition import PartitionDescription
from replicaplanner.utils.config import DEFAULT_KAFKA_BIN_PATH
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)

# Confluent packages ship the script without the .sh suffix
KAFKA_TOPICS_CONFLUENT = "kafka-topics"
KAFKA_TOPICS_APACHE = "kafka-topics.sh"


def _filter_topic(
    partitions: Iterable[PartitionDescription],
    topic: Optional[str],
) -> List[PartitionDescription]:
    if topic is None:
        return list(partitions)
    return [p for p in partitions if p.topic == topic]


class MetadataSource(ABC):
    """Abstract base class for cluster metadata sources."""

    @abstractmethod
    def describe(self, topic: Optional[str] = None) -> List[PartitionDescription]:
        """
        List partitions in cluster listing order.

        Args:
            topic: Only list partitions of this topic (None for all)

        Returns:
            Partition descriptions

        Raises:
            MetadataSourceError: If the metadata cannot be fetched
        """
        pass


class StaticMetadataSource(MetadataSource):
    """Metadata source backed by an in-memory partition list."""

    def __init__(self, partitions: Iterable[PartitionDescription]):
        self.partitions = list(partitions)

    def describe(self, topic: Optional[str] = None) -> List[PartitionDescription]:
        return _filter_topic(self.partitions, topic)


class DescribeFileSource(MetadataSource):
    """Metadata source reading saved `kafka-topics --describe` output."""

    def __init__(self, path: str):
        self.path = Path(path)

    def describe(self, topic: Optional[str] = None) -> List[PartitionDescription]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MetadataSourceError(f"Cannot read describe output {self.path}: {e}") from e

        partitions = _filter_topic(parse_describe_output(text.splitlines()), topic)

        logger.info(
            "Loaded partition metadata",
            path=str(self.path),
            topic=topic,
            partitions=len(partitions),
        )

        return partitions


class KafkaTopicsSource(MetadataSource):
    """
    Metadata source running the kafka-topics CLI.

    Connects through ZooKeeper (older clusters) or a bootstrap server.
    """

    def __init__(
        self,
        zookeeper: Optional[str] = None,
        bootstrap_server: Optional[str] = None,
        bin_path: Optional[str] = None,
        timeout_s: float = 120,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Initialize kafka-topics source.

        Args:
            zookeeper: Comma-separated ZooKeeper connect string
            bootstrap_server: Comma-separated broker list
            bin_path: Kafka bin directory searched when the CLI is not in PATH
            timeout_s: Timeout for a single CLI invocation
            runner: Subprocess runner (subprocess.run compatible)
        """
        if not zookeeper and not bootstrap_server:
            raise ConfigurationError("You must set --zookeeper or --bootstrap-server")
        if zookeeper and bootstrap_server:
            raise ConfigurationError("Only one of --zookeeper and --bootstrap-server may be set")

        self.zookeeper = zookeeper
        self.bootstrap_server = bootstrap_server
        self.bin_path = bin_path or DEFAULT_KAFKA_BIN_PATH
        self.timeout_s = timeout_s
        self._runner = runner
        self._binary: Optional[str] = None

    def find_binary(self) -> str:
        """
        Locate the kafka-topics CLI.

        Looks for the Confluent name, then the Apache name in PATH, then the
        Apache name in the configured bin directory.

        Returns:
            Path or name of the executable

        Raises:
            MetadataSourceError: If the CLI cannot be found
        """
        if self._binary is not None:
            return self._binary

        for name in (KAFKA_TOPICS_CONFLUENT, KAFKA_TOPICS_APACHE):
            if shutil.which(name):
                self._binary = name
                return name

        fallback = os.path.join(self.bin_path, KAFKA_TOPICS_APACHE)
        if shutil.which(fallback):
            self._binary = fallback
            return fallback

        raise MetadataSourceError(
            "kafka-topics CLI tool (ships with Kafka) not found in PATH "
            f"or in {self.bin_path}"
        )

    def _connection_args(self) -> List[str]:
        if self.zookeeper:
            return ["--zookeeper", self.zookeeper]
        return ["--bootstrap-server", self.bootstrap_server]

    def _run(self, args: List[str]) -> str:
        command = [self.find_binary()] + self._connection_args() + args

        logger.debug("Running kafka-topics", command=command)

        try:
            completed = self._runner(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                check=False,
            )
        except (OSError, subprocess.SubprocessError, UnicodeDecodeError) as e:
            raise MetadataSourceError(f"Failed to run {command[0]}: {e}") from e

        if completed.returncode != 0:
            raise MetadataSourceError(
                f"{command[0]} exited with {completed.returncode}: "
                f"{(completed.stderr or '').strip()}"
            )

        return completed.stdout

    def describe(self, topic: Optional[str] = None) -> List[PartitionDescription]:
        args = ["--describe"]
        if topic is not None:
            args += ["--topic", topic]

        output = self._run(args)
        partitions = _filter_topic(parse_describe_output(output.splitlines()), topic)

        logger.info(
            "Fetched partition metadata",
            topic=topic,
            partitions=len(partitions),
        )

        return partitions

    def delete_topic(self, topic: str) -> None:
        """
        Delete a topic.

        Args:
            topic: Topic name

        Raises:
            MetadataSourceError: If the deletion request fails
        """
        self._run(["--delete", "--topic", topic])

        logger.info("Requested topic deletion", topic=topic)
