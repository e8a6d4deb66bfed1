#!/usr/local/bin/python3
"""
Cloud VM DNS Sync

Points the Cloudflare A record of every Compute Engine VM at its current
external IP. A VM is picked up when one of its network interfaces has a
public PTR domain name configured; that name is the record kept in sync.
Stopped VMs have no external IP, so their record is removed.

One pass per invocation. The Cloudflare credential file is named by the
CLOUDFLARE_INI environment variable; Google credentials come from
Application Default Credentials.
"""

import argparse
import logging
import os
import sys

import structlog

from .config import ENV_LOG_LEVEL
from .errors import VmDnsSyncError
from .sync_logic import sync_vm_dns

log = structlog.get_logger()


def configure_logging(level_name):
    level = getattr(logging, level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync Cloudflare A records with Compute Engine VM IPs.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="report what would change without touching any record",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(os.getenv(ENV_LOG_LEVEL, "INFO"))
    try:
        sync_vm_dns(dry_run=args.dry_run)
    except VmDnsSyncError as e:
        print(f"Unable to update: {e}", file=sys.stderr)
        return 1
    except Exception:
        log.critical("An unhandled exception occurred in main", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
