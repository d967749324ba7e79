#!/usr/bin/env python3
"""
DC Health Report - Command Line Interface

Usage:
    dc-health-report                          # check forest, write report, mail it
    dc-health-report --skip-email             # write report only
    dc-health-report --create-password-file 'S3cret!'
    dc-health-report --inventory forest.yaml --report out/ad.htm

Exit codes: 0 on success (or when mail is skipped), 1 on mail dispatch failure.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .checks import build_checklist
from .config import Config
from .credential_manager import CredentialSealer
from .exceptions import CredentialError, DiscoveryError, NotificationError
from .health_check import ForestHealthCheck
from .inventory import PowerShellInventory, StaticInventory
from .logger import HealthLogger, configure_logging, get_logger
from .notifications import send_report
from .paths import paths
from .scanners.dc_scanner import DomainControllerScanner
from .utilities.reporter import HealthReportBuilder

EXIT_OK = 0
EXIT_MAIL_FAILED = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dc-health-report',
        description='Active Directory domain controller health report')
    parser.add_argument('--create-password-file', metavar='PASSWORD',
                        help='Seal the SMTP password for this account and exit')
    parser.add_argument('--skip-email', action='store_true',
                        help='Write the report without mailing it')
    parser.add_argument('--report', type=Path, default=paths.report_file,
                        help=f'Report output path (default: {paths.report_file})')
    parser.add_argument('--log', type=Path, default=paths.log_file,
                        help=f'Log output path (default: {paths.log_file})')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Per-check timeout in seconds (default: 60)')
    parser.add_argument('--error-log-days', type=int, default=None,
                        help='Trailing window for the error-log count, in days (default: 1)')
    parser.add_argument('--config', type=Path, default=None,
                        help=f'YAML configuration file (default: {paths.config_file})')
    parser.add_argument('--inventory', type=Path, default=None,
                        help='YAML inventory file instead of querying Active Directory')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debug messages')
    return parser


def create_password_file(secret: str, sealer: Optional[CredentialSealer] = None):
    """Seal the password and terminate the process."""
    logger = get_logger('Credential')
    sealer = sealer or CredentialSealer()
    try:
        path = sealer.seal(secret)
    except CredentialError as e:
        logger.error(f"Could not create password file: {e}")
        print(f"Password file was NOT created: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Password file created: {path}")
    sys.exit(0)


def run_report(args: argparse.Namespace, config: Config) -> int:
    logger = get_logger('Main')

    timeout = args.timeout if args.timeout is not None else config.get_timeout()
    days = (args.error_log_days if args.error_log_days is not None
            else config.get_event_log_days())

    try:
        if args.inventory:
            inventory = StaticInventory.from_yaml(args.inventory)
            logger.info(f"Using static inventory {args.inventory}")
        else:
            inventory = PowerShellInventory()
    except DiscoveryError as e:
        # Run continues with an empty inventory
        logger.error(f"Could not load inventory: {e}")
        inventory = StaticInventory()

    checks = build_checklist(config.get_service_checks(), config.get_diagnostic_checks())
    scanner = DomainControllerScanner(
        checks,
        inventory=inventory,
        timeout=timeout,
        error_log_days=days,
        event_log_name=config.get('event_log.log_name', 'Directory Service'),
        event_level=config.get('event_log.level', 2),
    )
    logger.info(f"Running {len(checks)} checks per DC, timeout {timeout}s")

    report = ForestHealthCheck(inventory, scanner).run()

    builder = HealthReportBuilder(title=config.get('report.title', 'Active Directory Health Check'))
    report_path = builder.generate(report, args.report)

    if args.skip_email:
        logger.info("Skipping email (--skip-email)")
        return EXIT_OK
    if not config.is_mail_enabled():
        logger.info("Mail disabled in configuration")
        return EXIT_OK

    try:
        send_report(config, report_path)
    except NotificationError as e:
        get_logger('Mail').error(f"Failed to send report: {e}")
        return EXIT_MAIL_FAILED

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(args.log, logging.DEBUG if args.verbose else logging.INFO)
    try:
        if args.create_password_file is not None:
            create_password_file(args.create_password_file)

        logger = get_logger('Main')
        logger.info("Starting domain controller health check")
        config = Config(args.config) if args.config else Config()
        exit_code = run_report(args, config)
        logger.info(f"Finished with exit code {exit_code}")
        return exit_code
    finally:
        HealthLogger.shutdown()


if __name__ == '__main__':
    sys.exit(main())
