#!/usr/bin/env python3
"""
DC Health Report - Data Model
Inventory entities (forest, domain, domain controller) and per-run results.
Nothing here is persisted; a run builds these and discards them at exit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class CheckOutcome(Enum):
    """Three-way result of a single check."""

    SUCCESS = 'Success'
    FAILURE = 'Failed'
    TIMEOUT = 'Timeout'

    @property
    def label(self) -> str:
        return self.value

    @property
    def css_class(self) -> str:
        return self.name.lower()


@dataclass
class ForestInfo:
    """Forest-level metadata."""
    name: str
    forest_mode: str = ''
    root_domain: str = ''
    schema_master: str = ''
    domain_naming_master: str = ''
    global_catalogs: List[str] = field(default_factory=list)
    sites: List[str] = field(default_factory=list)
    domains: List[str] = field(default_factory=list)


@dataclass
class DomainInfo:
    """Domain-level metadata."""
    name: str
    netbios_name: str = ''
    domain_mode: str = ''
    pdc_emulator: str = ''
    rid_master: str = ''
    infrastructure_master: str = ''


@dataclass
class DomainController:
    """A domain controller as discovered from directory metadata."""
    hostname: str
    domain: str


@dataclass
class DCAttributes:
    """Static attributes shown in the detail section for one DC."""
    os_version: str = ''
    site: str = ''
    address: str = ''
    sync_partners: List[str] = field(default_factory=list)
    reported_time: str = ''
    highest_usn: str = ''


@dataclass
class DCResult:
    """Everything a run learned about one domain controller."""
    controller: DomainController
    reachable: bool
    # (check name, outcome) in checklist order, exactly one per check
    results: List[Tuple[str, CheckOutcome]] = field(default_factory=list)
    attributes: Optional[DCAttributes] = None
    attributes_error: Optional[str] = None
    error_count: Optional[int] = None
    error_count_error: Optional[str] = None

    @property
    def hostname(self) -> str:
        return self.controller.hostname

    def outcome(self, check_name: str) -> Optional[CheckOutcome]:
        for name, outcome in self.results:
            if name == check_name:
                return outcome
        return None


@dataclass
class DomainReport:
    info: DomainInfo
    reachable: bool
    controllers: List[DCResult] = field(default_factory=list)


@dataclass
class ForestReport:
    """In-memory result of one run, rendered once into HTML."""
    forest: Optional[ForestInfo]
    reachable: bool
    check_names: List[str] = field(default_factory=list)
    domains: List[DomainReport] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)
    error_log_days: int = 1

    @property
    def targets(self) -> List[DCResult]:
        """All domain controllers across all domains, in discovery order."""
        return [dc for domain in self.domains for dc in domain.controllers]
