#!/usr/bin/env python3
"""
DC Health Report - Checklist and Timeout Runner

A check is either a service-status lookup or a dcdiag test. Every check
runs as its own unit of work on a daemon thread; the caller blocks on it
until it completes or the deadline passes:

  completed, predicate true   -> SUCCESS
  completed, predicate false  -> FAILURE
  completed by raising        -> FAILURE
  still running at deadline   -> TIMEOUT (the thread is abandoned)
"""

import logging
import threading
from concurrent.futures import Future, wait
from dataclasses import dataclass
from typing import Callable, List, Optional

from .logger import get_logger
from .models import CheckOutcome

SERVICE = 'service'
DIAGNOSTIC = 'diagnostic'

DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class Check:
    """One column of the summary table."""
    kind: str
    target: str  # service name or dcdiag test name

    @property
    def name(self) -> str:
        if self.kind == SERVICE:
            return f"{self.target} Service"
        return self.target


def build_checklist(services: List[str], diagnostics: List[str]) -> List[Check]:
    """Service checks first, then diagnostic tests, in configured order."""
    checks = [Check(SERVICE, svc) for svc in services]
    checks.extend(Check(DIAGNOSTIC, test) for test in diagnostics)
    return checks


def diagnostic_passed(output: Optional[str], test: str) -> bool:
    """dcdiag prints '......... DC01 passed test Replications' on success."""
    return bool(output) and f"passed test {test}" in output


def service_running(status: Optional[str]) -> bool:
    return (status or '').strip().lower() == 'running'


def run_with_timeout(work: Callable[[], bool], timeout: float,
                     description: str = '',
                     logger: Optional[logging.Logger] = None) -> CheckOutcome:
    """Run `work` in the background and classify it against the deadline."""
    logger = logger or get_logger('Check')

    future: Future = Future()

    def _target():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(work())
        except Exception as e:
            future.set_exception(e)

    # Daemon thread: an abandoned check must not hold the process open at exit
    worker = threading.Thread(target=_target, name='dc-check', daemon=True)
    worker.start()

    done, _ = wait([future], timeout=timeout)
    if not done:
        # Best effort: the remote command may keep running
        logger.warning(f"{description} timed out after {timeout}s")
        return CheckOutcome.TIMEOUT

    try:
        passed = future.result()
    except Exception as e:
        logger.warning(f"{description} failed: {e}")
        return CheckOutcome.FAILURE

    if passed:
        logger.info(f"{description} passed")
        return CheckOutcome.SUCCESS

    logger.warning(f"{description} failed")
    return CheckOutcome.FAILURE
