"""Impact scoring and report assembly.

Modules:
    thresholds: Shared score-to-tier table
    scorer: Keyword-based sector scoring
    report: Report assembly, JSON and CSV output
    formatting: Chat message rendering
"""

from tariffimpact.analysis.formatting import format_message
from tariffimpact.analysis.report import Report, assemble_report, report_to_dict, save_report
from tariffimpact.analysis.scorer import SectorResult, score_all, score_sector, score_sector_by_name
from tariffimpact.analysis.thresholds import DEFAULT_THRESHOLDS, RiskThresholds

__all__ = [
    "DEFAULT_THRESHOLDS",
    "Report",
    "RiskThresholds",
    "SectorResult",
    "assemble_report",
    "format_message",
    "report_to_dict",
    "save_report",
    "score_all",
    "score_sector",
    "score_sector_by_name",
]
