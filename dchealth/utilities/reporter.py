#!/usr/bin/env python3
"""
DC Health Report - HTML Report Generator
Renders a ForestReport into a single HTML document in one pass:
header, summary table (one row per DC, one column per check), then the
forest -> domain -> DC detail section.
"""

import logging
from html import escape
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..logger import get_logger
from ..models import (CheckOutcome, DCResult, DomainReport, ForestInfo,
                      ForestReport)

# Shown in every check column of an unreachable DC
OFFLINE_CELL = 'Offline'
# Shown instead of details for an entity that failed its ping
OFFLINE_MARKER = 'OFFLINE'

STYLE = """
        body { font-family: Arial, sans-serif; margin: 40px; background: #f5f5f5; }
        .container { max-width: 1400px; margin: 0 auto; background: white; padding: 40px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        h1 { color: #333; border-bottom: 3px solid #4a90d9; padding-bottom: 10px; }
        h2 { color: #4a90d9; margin-top: 30px; }
        .summary-box { background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0; }
        table { width: 100%; border-collapse: collapse; margin: 10px 0; }
        th, td { border: 1px solid #ddd; padding: 6px 10px; text-align: left; font-size: 13px; }
        th { background: #4a90d9; color: white; }
        table.details th { background: #e9ecef; color: #333; width: 25%; }
        .success { background: #28a745; color: white; }
        .failure { background: #dc3545; color: white; }
        .timeout { background: #ffc107; color: #333; }
        .offline { color: #dc3545; font-weight: bold; }
        .error { color: #dc3545; }
        .section { margin-left: 20px; }
        .legend span { padding: 4px 10px; margin-right: 8px; border-radius: 4px; }
        .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #ddd; color: #666; font-size: 12px; }
"""


def _text(value) -> str:
    if isinstance(value, (list, tuple)):
        value = ', '.join(str(v) for v in value)
    return escape(str(value)) if value not in (None, '') else '-'


class HealthReportBuilder:
    """Builds the health report HTML."""

    def __init__(self, title: str = 'Active Directory Health Check',
                 logger: Optional[logging.Logger] = None):
        self.title = title
        self.logger = logger or get_logger('Report')

    def generate(self, report: ForestReport, output_path: Path) -> Path:
        """Render the report and overwrite output_path with it."""
        html_content = self.build(report)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(html_content)

        self.logger.info(f"Report saved to {output_path}")
        return output_path

    def build(self, report: ForestReport) -> str:
        parts: List[str] = []
        parts.append(self._build_header(report))
        parts.append(self._build_summary_table(report))
        parts.append(self._build_details(report))
        parts.append(self._build_footer(report))
        return ''.join(parts)

    # -----------------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------------

    def _build_header(self, report: ForestReport) -> str:
        forest_name = report.forest.name if report.forest else 'unknown'
        legend = ''.join(
            f'<span class="{o.css_class}">{o.label}</span>' for o in CheckOutcome
        )
        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{escape(self.title)}</title>
    <style>{STYLE}    </style>
</head>
<body>
    <div class="container">
        <h1>{escape(self.title)}</h1>
        <div class="summary-box">
            <p><strong>Forest:</strong> {escape(forest_name)}</p>
            <p><strong>Generated:</strong> {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}</p>
            <p><strong>Domain controllers:</strong> {len(report.targets)}</p>
        </div>
        <p class="legend">{legend}</p>
"""

    def _build_summary_table(self, report: ForestReport) -> str:
        header_cells = ''.join(f'<th>{escape(name)}</th>' for name in report.check_names)
        rows = ''.join(self._build_summary_row(dc) for dc in report.targets)
        return f"""        <h2>Domain Controller Health</h2>
        <table class="summary">
            <thead>
                <tr><th>Identity</th><th>Ping</th>{header_cells}</tr>
            </thead>
            <tbody>
{rows}            </tbody>
        </table>
"""

    def _build_summary_row(self, dc: DCResult) -> str:
        cells = [f'<td>{escape(dc.hostname)}</td>']
        if not dc.reachable:
            cells.append('<td class="failure">Ping Fail</td>')
            cells.extend(f'<td class="failure">{OFFLINE_CELL}</td>' for _ in dc.results)
        else:
            cells.append('<td class="success">Ping Success</td>')
            cells.extend(
                f'<td class="{outcome.css_class}">{outcome.label}</td>'
                for _, outcome in dc.results
            )
        return f"                <tr>{''.join(cells)}</tr>\n"

    def _build_details(self, report: ForestReport) -> str:
        forest_name = report.forest.name if report.forest else 'unknown'
        parts = ['        <h2>Forest Details</h2>\n',
                 '        <div class="section forest">\n',
                 f'            <h3>Forest: {escape(forest_name)}</h3>\n']
        if report.forest is not None and report.reachable:
            parts.append(self._attribute_table(self._forest_rows(report.forest)))
        else:
            parts.append(f'            <p class="offline">{OFFLINE_MARKER}</p>\n')

        # Domains are listed even when forest metadata could not be read
        for domain in report.domains:
            parts.append(self._build_domain(domain, report.error_log_days))

        parts.append('        </div>\n')
        return ''.join(parts)

    def _build_domain(self, domain: DomainReport, error_log_days: int) -> str:
        info = domain.info
        parts = ['            <div class="section domain">\n',
                 f'                <h3>Domain: {escape(info.name)}</h3>\n']
        if domain.reachable:
            parts.append(self._attribute_table([
                ('DNS Name', info.name),
                ('NetBIOS Name', info.netbios_name),
                ('Domain Mode', info.domain_mode),
                ('PDC Emulator', info.pdc_emulator),
                ('RID Master', info.rid_master),
                ('Infrastructure Master', info.infrastructure_master),
            ]))
        else:
            parts.append(f'                <p class="offline">{OFFLINE_MARKER}</p>\n')

        for dc in domain.controllers:
            parts.append(self._build_dc(dc, error_log_days))

        parts.append('            </div>\n')
        return ''.join(parts)

    def _build_dc(self, dc: DCResult, error_log_days: int) -> str:
        parts = ['                <div class="section dc">\n',
                 f'                    <h4>Domain Controller: {escape(dc.hostname)}</h4>\n']
        if not dc.reachable:
            parts.append(f'                    <p class="offline">{OFFLINE_MARKER}</p>\n')
            parts.append('                </div>\n')
            return ''.join(parts)

        if dc.attributes_error:
            parts.append(
                f'                    <p class="error">Error: {escape(dc.attributes_error)}</p>\n')
        attrs = dc.attributes
        rows = []
        if attrs is not None:
            rows = [
                ('Operating System', attrs.os_version),
                ('Site', attrs.site),
                ('IPv4 Address', attrs.address),
                ('Sync Partners', attrs.sync_partners),
                ('Reported Time', attrs.reported_time),
                ('Highest Committed USN', attrs.highest_usn),
            ]
        rows.append((f'Errors (last {error_log_days} day(s))', self._error_count_cell(dc)))
        parts.append(self._attribute_table(rows, raw_last=True))
        parts.append('                </div>\n')
        return ''.join(parts)

    def _build_footer(self, report: ForestReport) -> str:
        return f"""        <div class="footer">
            <p>Generated by dc-health-report on {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}</p>
        </div>
    </div>
</body>
</html>
"""

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _forest_rows(forest: ForestInfo) -> List[Tuple[str, object]]:
        return [
            ('Forest Name', forest.name),
            ('Forest Mode', forest.forest_mode),
            ('Root Domain', forest.root_domain),
            ('Schema Master', forest.schema_master),
            ('Domain Naming Master', forest.domain_naming_master),
            ('Global Catalogs', forest.global_catalogs),
            ('Sites', forest.sites),
            ('Domains', forest.domains),
        ]

    @staticmethod
    def _error_count_cell(dc: DCResult) -> str:
        if dc.error_count_error is not None:
            return f'<span class="error">Error: {escape(dc.error_count_error)}</span>'
        return _text(dc.error_count)

    @staticmethod
    def _attribute_table(rows: Iterable[Tuple[str, object]], raw_last: bool = False) -> str:
        """Two-column key/value table. With raw_last the last value is pre-rendered HTML."""
        rows = list(rows)
        lines = ['<table class="details">']
        for index, (key, value) in enumerate(rows):
            is_raw = raw_last and index == len(rows) - 1
            lines.append(
                f'<tr><th>{escape(key)}</th><td>{value if is_raw else _text(value)}</td></tr>')
        lines.append('</table>')
        return '                    ' + '\n                    '.join(lines) + '\n'
