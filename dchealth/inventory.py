#!/usr/bin/env python3
"""
DC Health Report - Directory Inventory

Resolves forest -> domains -> domain controllers and the static attributes
shown for each of them. The scanner and the report only talk to the
DirectoryInventory interface:

  PowerShellInventory  - live forest through the ActiveDirectory module
  StaticInventory      - fixed inventory from a dict or YAML file
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import DiscoveryError, RemoteCommandError
from .models import DCAttributes, DomainController, DomainInfo, ForestInfo
from .scanners.base import PowerShellRunner, ps_quote


class DirectoryInventory(ABC):
    """Source of forest, domain and domain controller metadata."""

    @abstractmethod
    def forest_info(self) -> ForestInfo:
        """Forest metadata. Raises DiscoveryError when it can't be read."""

    @abstractmethod
    def list_domains(self) -> List[DomainInfo]:
        """Every domain of the forest."""

    @abstractmethod
    def list_domain_controllers(self, domain: str) -> List[DomainController]:
        """Every domain controller of a domain (by DNS name)."""

    @abstractmethod
    def attributes_of(self, dc: DomainController) -> DCAttributes:
        """Static attributes of one domain controller."""


def _as_list(value: Any) -> List:
    """ConvertTo-Json collapses single-element arrays into scalars."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _server_from_dn(dn: str) -> str:
    """'CN=NTDS Settings,CN=DC02,CN=Servers,...' -> 'DC02'."""
    parts = [p.strip() for p in str(dn).split(',')]
    if len(parts) > 1 and parts[0].upper() == 'CN=NTDS SETTINGS':
        return parts[1].split('=', 1)[-1]
    return parts[0].split('=', 1)[-1]


class PowerShellInventory(PowerShellRunner, DirectoryInventory):
    """Live inventory through Get-ADForest / Get-ADDomain / Get-ADDomainController."""

    LOG_CATEGORY = 'Inventory'

    def __init__(self, logger: Optional[logging.Logger] = None,
                 query_timeout: float = 120):
        super().__init__(logger)
        self.query_timeout = query_timeout
        self._forest: Optional[ForestInfo] = None

    def _query(self, script: str) -> Any:
        try:
            return self._run_ps_json(
                "Import-Module ActiveDirectory -ErrorAction Stop; " + script,
                timeout=self.query_timeout)
        except RemoteCommandError as e:
            raise DiscoveryError(e.reason) from e

    def forest_info(self) -> ForestInfo:
        if self._forest is not None:
            return self._forest

        data = self._query(
            "Get-ADForest | Select-Object Name,RootDomain,SchemaMaster,"
            "DomainNamingMaster,GlobalCatalogs,Sites,Domains,"
            "@{n='ForestMode';e={$_.ForestMode.ToString()}}"
        )
        if not isinstance(data, dict):
            raise DiscoveryError("Get-ADForest returned no forest")

        self._forest = ForestInfo(
            name=data.get('Name', ''),
            forest_mode=data.get('ForestMode', ''),
            root_domain=data.get('RootDomain', ''),
            schema_master=data.get('SchemaMaster', ''),
            domain_naming_master=data.get('DomainNamingMaster', ''),
            global_catalogs=_as_list(data.get('GlobalCatalogs')),
            sites=_as_list(data.get('Sites')),
            domains=_as_list(data.get('Domains')),
        )
        self.logger.info(
            f"Forest {self._forest.name}: {len(self._forest.domains)} domain(s)")
        return self._forest

    def list_domains(self) -> List[DomainInfo]:
        domains = []
        for name in self.forest_info().domains:
            try:
                data = self._query(
                    f"Get-ADDomain -Server {ps_quote(name)} | Select-Object "
                    f"DNSRoot,NetBIOSName,PDCEmulator,RIDMaster,"
                    f"InfrastructureMaster,"
                    f"@{{n='DomainMode';e={{$_.DomainMode.ToString()}}}}"
                )
            except DiscoveryError as e:
                # The domain is still listed; its details are just missing
                self.logger.warning(f"Could not read domain {name}: {e}")
                domains.append(DomainInfo(name=name))
                continue

            data = data if isinstance(data, dict) else {}
            domains.append(DomainInfo(
                name=data.get('DNSRoot') or name,
                netbios_name=data.get('NetBIOSName', ''),
                domain_mode=data.get('DomainMode', ''),
                pdc_emulator=data.get('PDCEmulator', ''),
                rid_master=data.get('RIDMaster', ''),
                infrastructure_master=data.get('InfrastructureMaster', ''),
            ))
        return domains

    def list_domain_controllers(self, domain: str) -> List[DomainController]:
        data = self._query(
            f"Get-ADDomainController -Filter * -Server {ps_quote(domain)} "
            f"| Select-Object HostName"
        )
        controllers = [
            DomainController(hostname=entry['HostName'], domain=domain)
            for entry in _as_list(data)
            if isinstance(entry, dict) and entry.get('HostName')
        ]
        self.logger.info(f"Domain {domain}: {len(controllers)} domain controller(s)")
        return controllers

    def attributes_of(self, dc: DomainController) -> DCAttributes:
        host = ps_quote(dc.hostname)
        data = self._run_ps_json(
            f"Import-Module ActiveDirectory -ErrorAction Stop; "
            f"$dc = Get-ADDomainController -Identity {host} -Server {host}; "
            f"$partners = @(Get-ADReplicationPartnerMetadata -Target {host} "
            f"-ErrorAction SilentlyContinue | ForEach-Object {{ $_.Partner }}); "
            f"$dse = Get-ADRootDSE -Server {host}; "
            f"$os = Get-CimInstance Win32_OperatingSystem -ComputerName {host}; "
            f"[pscustomobject]@{{ "
            f"OperatingSystem = \"$($dc.OperatingSystem) $($dc.OperatingSystemVersion)\"; "
            f"Site = $dc.Site; IPv4Address = $dc.IPv4Address; Partners = $partners; "
            f"LocalTime = $os.LocalDateTime.ToString('yyyy-MM-dd HH:mm:ss'); "
            f"HighestCommittedUSN = [string]$dse.highestCommittedUSN }}",
            timeout=self.query_timeout,
        )
        data = data if isinstance(data, dict) else {}
        return DCAttributes(
            os_version=(data.get('OperatingSystem') or '').strip(),
            site=data.get('Site') or '',
            address=data.get('IPv4Address') or '',
            sync_partners=[_server_from_dn(p) for p in _as_list(data.get('Partners'))],
            reported_time=data.get('LocalTime') or '',
            highest_usn=data.get('HighestCommittedUSN') or '',
        )


class StaticInventory(DirectoryInventory):
    """Fixed inventory, e.g. loaded from a YAML file with --inventory."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        data = data or {}
        self._forest: Optional[ForestInfo] = None
        self._domains: List[DomainInfo] = []
        self._controllers: Dict[str, List[DomainController]] = {}
        self._attributes: Dict[str, DCAttributes] = {}

        try:
            for entry in data.get('domains') or []:
                entry = dict(entry)
                controllers = entry.pop('domain_controllers', None) or []
                domain = DomainInfo(**entry)
                self._domains.append(domain)
                self._controllers[domain.name] = []
                for dc_entry in controllers:
                    dc_entry = dict(dc_entry)
                    dc = DomainController(hostname=dc_entry.pop('hostname'),
                                          domain=domain.name)
                    self._controllers[domain.name].append(dc)
                    self._attributes[dc.hostname] = DCAttributes(**dc_entry)

            forest = dict(data.get('forest') or {})
            if forest.get('name'):
                forest.setdefault('domains', [d.name for d in self._domains])
                self._forest = ForestInfo(**forest)
        except (KeyError, TypeError, ValueError) as e:
            raise DiscoveryError(f"Malformed inventory: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path) -> 'StaticInventory':
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DiscoveryError(f"Could not read inventory {path}: {e}") from e
        if not isinstance(data, dict):
            raise DiscoveryError(f"Inventory {path} must contain a mapping")
        return cls(data)

    def forest_info(self) -> ForestInfo:
        if self._forest is None:
            raise DiscoveryError("Inventory has no forest")
        return self._forest

    def list_domains(self) -> List[DomainInfo]:
        return list(self._domains)

    def list_domain_controllers(self, domain: str) -> List[DomainController]:
        if domain not in self._controllers:
            raise DiscoveryError(f"Unknown domain: {domain}")
        return list(self._controllers[domain])

    def attributes_of(self, dc: DomainController) -> DCAttributes:
        return self._attributes.get(dc.hostname, DCAttributes())
