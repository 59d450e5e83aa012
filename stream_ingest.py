"""CLI entrypoint for stream-ingestion.

This file wires together:

- Job config loading and validation (YAML file or command-line flags)
- Source and sink selection through the registry
- Logging setup
- The ingestion run and its summary

Examples:
    stream-ingest --config jobs/export.yaml
    stream-ingest --source ./big.bin --sink file --dest ./copy.bin
    stream-ingest --source ./big.bin --sink s3 --bucket landing --key raw/big.bin
    stream-ingest --source ./big.bin --sink slow --delay 0.05
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from ingestion import __version__
from ingestion.config import JobConfig, load_job_config, parse_job_config
from ingestion.exceptions import ConfigurationError
from ingestion.logging_config import setup_logging
from ingestion.registry import list_sinks
from ingestion.runner import apply_logging_config, run_job

logger = logging.getLogger(__name__)


def list_sink_types() -> List[str]:
    """Return list of available sink types."""
    return list_sinks()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stream a source into a sink with backpressure",
    )
    parser.add_argument("--config", help="Path to a YAML job file")
    parser.add_argument("--source", help="Path of the file to ingest (instead of --config)")
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Bytes read from the source per chunk (default: 65536)",
    )
    parser.add_argument(
        "--sink",
        default="file",
        help="Sink type when not using --config (see --list-sinks; default: file)",
    )
    parser.add_argument("--dest", help="Destination path for the file sink")
    parser.add_argument(
        "--no-atomic",
        action="store_true",
        help="Write the file sink's target directly instead of via a .partial file",
    )
    parser.add_argument("--bucket", help="Bucket for the s3 sink")
    parser.add_argument("--key", help="Object key for the s3 sink")
    parser.add_argument("--endpoint-url", help="Custom endpoint for S3-compatible storage")
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Per-chunk delay in seconds for the slow sink",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the job configuration and exit without moving data",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the run result as JSON",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose (DEBUG level) logging"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress all output except errors"
    )
    parser.add_argument(
        "--log-format",
        choices=["human", "json", "simple"],
        default=None,
        help="Log format (default: human). Can also set via INGEST_LOG_FORMAT env var",
    )
    parser.add_argument(
        "--list-sinks",
        action="store_true",
        help="List available sink types and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"stream-ingestion {__version__}",
        help="Show version and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_sinks:
        print("Available sink types:")
        for name in list_sink_types():
            print(f"  - {name}")
        return 0

    log_level = (
        logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.INFO
    )
    setup_logging(level=log_level, format_type=args.log_format, use_colors=True)

    return IngestCommand(parser, args).execute()


class IngestCommand:
    """Encapsulates the CLI workflow (config resolution, validation, run)."""

    def __init__(self, parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
        self.parser = parser
        self.args = args

    def execute(self) -> int:
        try:
            config = self._load_config()
        except ConfigurationError as exc:
            logger.error("%s", exc)
            return 1

        if self.args.validate_only:
            print(f"Job '{config.name}' is valid")
            return 0

        # Explicit -v/-q on the command line win over the job file.
        if not (self.args.verbose or self.args.quiet):
            apply_logging_config(config.logging)

        try:
            result = run_job(config)
        except Exception as exc:
            logger.error("Ingestion job '%s' failed: %s", config.name, exc)
            return 1

        if self.args.json_output:
            print(json.dumps({"job": config.name, **result.to_dict()}))
        else:
            print(
                f"Ingested {result.total_bytes} bytes in {result.chunk_count} chunks "
                f"({result.duration:.3f}s)"
            )
        return 0

    def _load_config(self) -> JobConfig:
        if self.args.config:
            if self.args.source:
                self.parser.error("--config and --source are mutually exclusive")
            return load_job_config(self.args.config)
        if not self.args.source:
            self.parser.error("either --config or --source is required")
        return parse_job_config(self._config_from_flags(), enable_env_substitution=False)

    def _config_from_flags(self) -> Dict[str, Any]:
        args = self.args
        source: Dict[str, Any] = {"type": "file", "path": args.source}
        if args.chunk_size is not None:
            source["chunk_size"] = args.chunk_size

        sink: Dict[str, Any] = {"type": args.sink}
        if args.dest:
            sink["path"] = args.dest
        if args.no_atomic:
            sink["atomic"] = False
        if args.bucket:
            sink["bucket"] = args.bucket
        if args.key:
            sink["key"] = args.key
        if args.endpoint_url:
            sink["endpoint_url"] = args.endpoint_url
        if args.delay is not None:
            sink["delay_seconds"] = args.delay

        return {"name": "cli", "source": source, "sink": sink}


if __name__ == "__main__":
    sys.exit(main())
