#!/usr/bin/env python3
"""
DC Health Report - Reachability Probe
A single ICMP echo decides whether a host gets checked at all.
"""

import subprocess
import sys

from .logger import get_logger

logger = get_logger('Ping')


def build_ping_command(host: str) -> list:
    """One echo request with a one second reply wait."""
    ping_flag = '-n' if sys.platform == 'win32' else '-c'
    timeout_flag = '-w' if sys.platform == 'win32' else '-W'
    # Windows -w is in milliseconds, Linux -W is in seconds
    timeout_val = '1000' if sys.platform == 'win32' else '1'
    return ['ping', ping_flag, '1', timeout_flag, timeout_val, host]


def is_reachable(host: str, timeout: float = 5) -> bool:
    """Probe a host once. No retry."""
    try:
        result = subprocess.run(
            build_ping_command(host), capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Ping to {host} did not return within {timeout}s")
        return False
    except OSError as e:
        logger.error(f"Could not run ping for {host}: {e}")
        return False

    # Windows ping exits 0 on "Destination host unreachable" replies
    if result.returncode == 0 and 'unreachable' not in (result.stdout or '').lower():
        logger.info(f"{host} is reachable")
        return True

    logger.warning(f"{host} did not answer ping")
    return False
