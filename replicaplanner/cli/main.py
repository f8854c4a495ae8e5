#!/usr/bin/env python3
"""
Command-line entry point for generating partition reassignment plans.

Usage:
    # Scale topic "events" to 4 replicas on brokers 0..8
    replica-planner --zookeeper zk1:2181 scale --topic events --replication 4 \\
        --first-broker-id 0 --last-broker-id 8 > plan.json

    # Move every replica off broker 4 onto random brokers in 0..8
    replica-planner --zookeeper zk1:2181 decommission --broker-id 4 \\
        --first-broker-id 0 --last-broker-id 8 > plan.json

    # Move leadership of broker 4 to broker 9
    replica-planner --bootstrap-server kafka1:9092 decommission --broker-id 4 \\
        --replace-with 9 --leader-only > plan.json

The plan is applied with:
    kafka-reassign-partitions.sh --reassignment-json-file plan.json --execute
"""

import argparse
import sys
from typing import IO, List, Optional, Tuple

from replicaplanner.errors import (
    ConfigurationError,
    MetadataSourceError,
    PlannerError,
    PlanningError,
)
from replicaplanner.metadata.source import (
    DescribeFileSource,
    KafkaTopicsSource,
    MetadataSource,
)
from replicaplanner.planner.builder import PlanBuilder, PlanResult
from replicaplanner.planner.policy import DecommissionPolicy, ReassignmentPolicy, ScalePolicy
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.planner.selector import CandidateSelector
from replicaplanner.planner.serializer import PlanSerializer
from replicaplanner.planner.validation import validate_plan
from replicaplanner.utils.config import Config
from replicaplanner.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PLANNING_ERROR = 60
EXIT_INVALID_PLAN = 65
EXIT_METADATA_ERROR = 70
EXIT_CONFIG_ERROR = 80

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
LOG_FORMATS = ('json', 'console')


def broker_id(value: str) -> int:
    """argparse type for a single broker ID."""
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid broker ID: {value!r}")
    if result < 0:
        raise argparse.ArgumentTypeError(f"broker ID must be non-negative: {value!r}")
    return result


def broker_list(value: str) -> List[int]:
    """argparse type for a comma-separated list of broker IDs."""
    return [broker_id(item.strip()) for item in value.split(",") if item.strip()]


def _add_range_args(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument(
        '-f', '--first-broker-id',
        type=broker_id,
        required=required,
        help='First (= lowest) broker ID of the range new replicas are '
             'randomly selected from. Example: 0'
    )
    parser.add_argument(
        '-l', '--last-broker-id',
        type=broker_id,
        required=required,
        help='Last (= highest) broker ID of the range new replicas are '
             'randomly selected from. Example: 8'
    )
    parser.add_argument(
        '-x', '--exclude',
        type=broker_list,
        action='append',
        default=[],
        help='Broker IDs that must never be selected (repeatable, comma-separated)'
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='replica-planner',
        description='Generates a Kafka partition reassignment JSON plan to stdout',
    )

    parser.add_argument(
        '-c', '--config',
        type=str,
        help='YAML configuration file'
    )
    parser.add_argument(
        '-z', '--zookeeper',
        type=str,
        help='Comma-separated list of ZooKeeper servers the brokers are '
             'registered with. Example: zookeeper1:2181,zookeeper2:2181'
    )
    parser.add_argument(
        '--bootstrap-server',
        type=str,
        help='Comma-separated list of brokers to query (newer clusters)'
    )
    parser.add_argument(
        '-p', '--kafka-bin-path',
        type=str,
        help='Kafka bin directory, used when kafka-topics is not in PATH'
    )
    parser.add_argument(
        '--describe-file',
        type=str,
        help='Read saved `kafka-topics --describe` output instead of querying the cluster'
    )
    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Write the plan to this file instead of stdout'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for the random broker selection (reproducible plans)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=LOG_LEVELS,
        help='Logging level (default: INFO)'
    )
    parser.add_argument(
        '--log-format',
        type=str,
        choices=LOG_FORMATS,
        help='Log output format (default: json)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    scale = subparsers.add_parser(
        'scale',
        help='Scale the replication factor of a topic up or down',
        description='Scale the replication factor of a topic. New replicas are '
                    'randomly selected from the broker range; on scale down the '
                    'leader is never removed.',
    )
    scale.add_argument(
        '-t', '--topic',
        type=str,
        required=True,
        help='Topic whose replication factor is changed'
    )
    scale.add_argument(
        '-r', '--replication',
        type=int,
        required=True,
        help='Desired number of replicas. Zero requests topic deletion; a '
             'negative value or one greater than the number of brokers leaves '
             'the partitions unchanged'
    )
    scale.add_argument(
        '--delete-topic',
        action='store_true',
        help='Actually delete the topic when --replication is 0'
    )
    _add_range_args(scale, required=True)

    decommission = subparsers.add_parser(
        'decommission',
        help='Move all replicas (or leaderships) away from a broker',
        description='Replace a broker in every replica list it belongs to, '
                    'either with randomly selected brokers from a range or '
                    'with an explicitly named broker.',
    )
    decommission.add_argument(
        '-b', '--broker-id',
        type=broker_id,
        required=True,
        help='Broker to move replicas away from. Example: 4'
    )
    decommission.add_argument(
        '-r', '--replace-with',
        type=broker_id,
        help='Move replicas to this broker instead of random ones. Cannot be '
             'combined with --first-broker-id/--last-broker-id'
    )
    decommission.add_argument(
        '--leader-only',
        action='store_true',
        help='Only reassign partitions the broker is currently leader of. '
             'Has no short form: -o is the global --output option'
    )
    _add_range_args(decommission, required=False)

    return parser


def _validate_config(config: Config) -> None:
    level = config.get("logging.level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid logging.level {level!r}, expected one of {', '.join(LOG_LEVELS)}"
        )

    log_format = config.get("logging.format")
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(
            f"Invalid logging.format {log_format!r}, expected one of {', '.join(LOG_FORMATS)}"
        )

    exclude = config.get("planner.exclude")
    if exclude is not None and not isinstance(exclude, list):
        raise ConfigurationError(
            f"planner.exclude must be a list of broker IDs, got {exclude!r}"
        )


def load_config(args: argparse.Namespace) -> Config:
    """
    Load configuration and apply command-line overrides.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = Config(args.config)

    if args.zookeeper and args.bootstrap_server:
        raise ConfigurationError("Only one of --zookeeper and --bootstrap-server may be set")
    if args.zookeeper:
        config.set("kafka.zookeeper", args.zookeeper)
        config.set("kafka.bootstrap_server", None)
    if args.bootstrap_server:
        config.set("kafka.bootstrap_server", args.bootstrap_server)
        config.set("kafka.zookeeper", None)
    if args.kafka_bin_path:
        config.set("kafka.bin_path", args.kafka_bin_path)
    if args.seed is not None:
        config.set("planner.seed", args.seed)
    if args.log_level:
        config.set("logging.level", args.log_level)
    if args.log_format:
        config.set("logging.format", args.log_format)

    _validate_config(config)

    return config


def build_source(args: argparse.Namespace, config: Config) -> MetadataSource:
    """Create the metadata source selected by the configuration."""
    if args.describe_file:
        return DescribeFileSource(args.describe_file)

    return KafkaTopicsSource(
        zookeeper=config.get("kafka.zookeeper"),
        bootstrap_server=config.get("kafka.bootstrap_server"),
        bin_path=config.get("kafka.bin_path"),
        timeout_s=config.get("kafka.command_timeout_s", 120),
    )


def _exclude_list(args: argparse.Namespace, config: Config) -> frozenset:
    excluded = set()
    for item in config.get("planner.exclude") or []:
        try:
            excluded.add(int(item))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid broker ID in planner.exclude: {item!r}")
    for ids in args.exclude:
        excluded.update(ids)
    return frozenset(excluded)


def build_policy(
    args: argparse.Namespace,
    config: Config,
    selector: CandidateSelector,
) -> Tuple[ReassignmentPolicy, Optional[BrokerPool], Optional[str]]:
    """
    Create the reassignment policy for the selected command.

    Returns:
        Tuple of (policy, pool new brokers are drawn from, topic filter)

    Raises:
        ConfigurationError: If the command options are contradictory
    """
    excluded = _exclude_list(args, config)

    if args.command == 'scale':
        pool = BrokerPool(args.first_broker_id, args.last_broker_id, excluded)
        return ScalePolicy(args.replication, pool, selector), pool, args.topic

    has_range = args.first_broker_id is not None or args.last_broker_id is not None

    if args.replace_with is not None:
        if has_range:
            raise ConfigurationError(
                "Only one of --replace-with and "
                "<--first-broker-id|--last-broker-id> should be used"
            )
        policy = DecommissionPolicy(
            subject=args.broker_id,
            selector=selector,
            explicit_replacement=args.replace_with,
            leader_only=args.leader_only,
            exclude=excluded,
        )
        return policy, None, None

    if args.first_broker_id is None:
        raise ConfigurationError("You must set the parameter --first-broker-id")
    if args.last_broker_id is None:
        raise ConfigurationError("You must set the parameter --last-broker-id")

    policy = DecommissionPolicy(
        subject=args.broker_id,
        selector=selector,
        pool=BrokerPool(args.first_broker_id, args.last_broker_id, excluded),
        leader_only=args.leader_only,
        exclude=excluded,
    )
    return policy, policy.pool, None


def _handle_deletion(
    args: argparse.Namespace,
    source: MetadataSource,
    topics: List[str],
) -> None:
    for topic in topics:
        if not args.delete_topic:
            logger.warning(
                "Replication factor 0 requests topic deletion; "
                "rerun with --delete-topic to delete it",
                topic=topic,
            )
            continue

        if not isinstance(source, KafkaTopicsSource):
            raise ConfigurationError("Deleting a topic needs --zookeeper or --bootstrap-server")
        source.delete_topic(topic)


def _report_errors(result: PlanResult) -> None:
    for key, error in result.errors.items():
        logger.warning(
            "Partition left unchanged",
            topic=key.topic,
            partition=key.partition,
            error_kind=error.kind,
            error=str(error),
        )


def _write_plan(result: PlanResult, output: Optional[str], stdout: IO[str]) -> None:
    serializer = PlanSerializer()

    if not output:
        serializer.write(result, stdout)
        return

    try:
        with open(output, "w") as f:
            serializer.write(result, f)
    except OSError as e:
        raise ConfigurationError(f"Cannot write plan to {output}: {e}") from e

    logger.info("Wrote reassignment plan", path=output, partitions=len(result.entries))


def run(args: argparse.Namespace, config: Config, stdout: IO[str]) -> int:
    """
    Plan a reassignment for parsed arguments.

    Returns:
        Process exit code
    """
    selector = CandidateSelector(seed=config.get("planner.seed"))
    policy, pool, topic = build_policy(args, config, selector)
    source = build_source(args, config)

    partitions = source.describe(topic)
    if topic is not None and not partitions:
        logger.warning("Topic has no partitions", topic=topic)

    result = PlanBuilder(policy).build(partitions)

    # Scaling to zero deletes the topic even when it reports no partitions
    if args.command == 'scale' and args.replication == 0:
        _handle_deletion(args, source, result.topics_to_delete or [topic])
        return EXIT_OK

    if not validate_plan(result, pool):
        return EXIT_INVALID_PLAN

    _report_errors(result)
    _write_plan(result, args.output, stdout)

    return EXIT_OK


def main(argv: Optional[List[str]] = None, stdout: Optional[IO[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    stdout = stdout or sys.stdout

    try:
        config = load_config(args)
    except ConfigurationError as e:
        configure_logging()
        logger.error("Invalid configuration", error=str(e))
        return EXIT_CONFIG_ERROR

    try:
        configure_logging(
            log_level=config.get("logging.level", "INFO"),
            log_format=config.get("logging.format", "json"),
            log_output=config.get("logging.output", "stderr"),
        )
    except OSError as e:
        configure_logging()
        logger.error("Cannot open log output", error=str(e))
        return EXIT_CONFIG_ERROR

    try:
        return run(args, config, stdout)

    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return EXIT_CONFIG_ERROR

    except MetadataSourceError as e:
        logger.error("Cannot read cluster metadata", error=str(e))
        return EXIT_METADATA_ERROR

    except PlanningError as e:
        logger.error(
            "No reassignment plan generated",
            error_kind=e.kind,
            error=str(e),
            partition=str(e.partition_key) if e.partition_key else None,
        )
        return EXIT_PLANNING_ERROR

    except PlannerError as e:
        logger.error("Planner error", error=str(e))
        return EXIT_PLANNING_ERROR


def run_cli() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run_cli()
