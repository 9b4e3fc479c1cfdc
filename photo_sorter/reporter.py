"""Reporting for finished sorting runs."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .models import OutcomeStatus, RunSummary
from .utils import ensure_directory, format_bytes

logger = logging.getLogger(__name__)


class SortReporter:
    """Generates human-readable and JSON reports for a run summary."""

    def __init__(self, max_listed: int = 20):
        self.max_listed = max_listed

    def generate_summary_report(self, summary: RunSummary) -> str:
        """
        Generate human-readable summary report.

        Args:
            summary: Summary returned by the pipeline

        Returns:
            Formatted summary report
        """
        report: List[str] = []
        report.append("=" * 50)
        report.append("PHOTO SORT SUMMARY REPORT")
        report.append("=" * 50)
        report.append(f"Completed: {summary.timestamp or 'Unknown'}")
        report.append(f"Mode: {'DRY RUN' if summary.dry_run else 'LIVE RUN'} "
                      f"({'copy' if summary.copy else 'move'})")
        report.append("")

        report.append("=== FILE STATISTICS ===")
        report.append(f"• Files discovered: {summary.total_discovered:,}")
        report.append(f"• Succeeded: {summary.succeeded:,} ({format_bytes(summary.bytes_relocated)})")
        report.append(f"• Skipped: {summary.skipped:,}")
        report.append(f"• Failed: {summary.failed:,}")
        report.append("")

        for status, title in ((OutcomeStatus.SKIPPED, "SKIPPED FILES"),
                              (OutcomeStatus.FAILED, "FAILED FILES")):
            lines = self._outcome_lines(summary, status)
            if lines:
                report.append(f"=== {title} ===")
                report.extend(lines)
                report.append("")

        status_line = "COMPLETE" if summary.failed == 0 else "COMPLETED WITH FAILURES"
        report.append(f"STATUS: {status_line}")
        return "\n".join(report)

    def _outcome_lines(self, summary: RunSummary, status: OutcomeStatus) -> List[str]:
        matching = [o for o in summary.outcomes if o.status is status]
        lines = [f"  - {o.candidate.display_name}: {o.reason}" for o in matching[:self.max_listed]]
        if len(matching) > self.max_listed:
            lines.append(f"  - ... and {len(matching) - self.max_listed} more")
        return lines

    def save_report(self, summary: RunSummary, report_path: Optional[Path] = None) -> Path:
        """
        Save the run summary as JSON.

        Args:
            summary: Summary returned by the pipeline
            report_path: Target file (auto-named in the working directory if None)

        Returns:
            Path to saved report file
        """
        if report_path is None:
            timestamp = (summary.timestamp or 'unknown').replace(':', '-')
            report_path = Path(f"photosort_report_{timestamp}.json")

        ensure_directory(report_path.parent)
        with open(report_path, 'w') as f:
            json.dump(summary.to_dict(), f, indent=2)
        logger.info(f"Report saved: {report_path}")
        return report_path
