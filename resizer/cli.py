"""
Command Line Interface for running the resize pipeline by hand.
"""

import argparse
import json
import logging
from typing import List, Optional

import urllib3

from .config import ResizerConfig, parse_dimensions
from .event import make_event
from .exceptions import ConfigError
from .handler import build_pipeline


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('resizer')


def get_config(args: argparse.Namespace) -> ResizerConfig:
    """Get configuration from environment and CLI overrides."""
    config = ResizerConfig.from_env()

    if getattr(args, 'destination_bucket', None):
        config.destination_bucket = args.destination_bucket
    if getattr(args, 'sizes', None):
        config.dimensions = parse_dimensions(args.sizes)
    if getattr(args, 'no_invalidate', False):
        config.invalidate_cache = False
    if getattr(args, 'distribution_id', None):
        config.distribution_id = args.distribution_id
    if getattr(args, 's3_endpoint', None):
        config.s3.endpoint = args.s3_endpoint
    if getattr(args, 's3_access_key', None):
        config.s3.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.s3.secret_key = args.s3_secret_key
    if getattr(args, 'no_verify_ssl', False):
        config.s3.verify_ssl = False

    return config


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Add pipeline configuration arguments to a parser."""
    pipeline_group = parser.add_argument_group('Pipeline')
    pipeline_group.add_argument('--destination-bucket', help='Override RESIZER_DESTINATION_BUCKET')
    pipeline_group.add_argument('--sizes', metavar='WxH[,WxH...]',
                                help='Override RESIZER_DIMENSIONS (e.g. 100x100,200x200)')
    pipeline_group.add_argument('--distribution-id', help='Override RESIZER_DISTRIBUTION_ID')
    pipeline_group.add_argument('--no-invalidate', action='store_true',
                                help='Skip CDN cache invalidation')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')
    s3_group.add_argument('--no-verify-ssl', action='store_true',
                          help='Do not verify TLS certificates')


def run_event(args: argparse.Namespace, event: dict, logger: logging.Logger) -> int:
    """Run the pipeline for one event and print the report."""
    try:
        config = get_config(args)
        pipeline = build_pipeline(config, logger)
    except (ConfigError, ValueError) as e:
        logger.error(str(e))
        return 1

    if not config.s3.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    try:
        report = pipeline.run(event)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Pipeline failed: {e}")
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    elif not args.quiet:
        print()
        for outcome in report.stages:
            error = f" ({outcome.error})" if outcome.error else ''
            print(f"  {outcome.stage:<11} {outcome.status.value:<16} {outcome.detail}{error}")
        print(f"Variants: {report.variants_uploaded} uploaded, {report.variants_failed} failed")
        print(f"Time: {report.elapsed_seconds:.2f}s")

    return 0 if report.succeeded else 1


def cmd_process(args: argparse.Namespace) -> int:
    """Execute process command."""
    logger = setup_logging(args.verbose)
    logger.info(f"Processing {args.bucket}/{args.key}")
    return run_event(args, make_event(args.bucket, args.key), logger)


def cmd_replay(args: argparse.Namespace) -> int:
    """Execute replay command."""
    logger = setup_logging(args.verbose)

    try:
        with open(args.event) as f:
            event = json.load(f)
    except FileNotFoundError:
        logger.error(f"Event file not found: {args.event}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Event file is not valid JSON: {e}")
        return 1

    return run_event(args, event, logger)


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except (ConfigError, ValueError) as e:
        logger.error(str(e))
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    sizes = ', '.join(d.label for d in config.dimensions)
    logger.info(f"Destination: {config.destination_bucket}")
    logger.info(f"Sizes: {sizes}")
    if config.invalidate_cache:
        logger.info(f"Invalidation: {config.distribution_id} {config.invalidation_path}")
    else:
        logger.info("Invalidation: disabled")
    logger.info("Configuration OK")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='resizer',
        description='Resize images into fixed-size variants and invalidate the CDN',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m resizer process --bucket uploads --key photos/cat.jpg
  python -m resizer replay --event notification.json --json
  python -m resizer validate

Configuration is read from RESIZER_* and S3_* environment variables.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Process command
    process_parser = subparsers.add_parser('process', help='Resize one source object')
    process_parser.add_argument('-b', '--bucket', required=True, help='Source bucket')
    process_parser.add_argument('-k', '--key', required=True, help='Source object key')
    process_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress report output')
    process_parser.add_argument('--json', action='store_true', help='Print the report as JSON')
    process_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(process_parser)

    # Replay command
    replay_parser = subparsers.add_parser('replay', help='Run the pipeline for a saved notification')
    replay_parser.add_argument('-e', '--event', required=True, help='Notification JSON file')
    replay_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress report output')
    replay_parser.add_argument('--json', action='store_true', help='Print the report as JSON')
    replay_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(replay_parser)

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Check configuration')
    validate_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(validate_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'process':
        return cmd_process(parsed_args)
    elif parsed_args.command == 'replay':
        return cmd_replay(parsed_args)
    elif parsed_args.command == 'validate':
        return cmd_validate(parsed_args)

    return 1
