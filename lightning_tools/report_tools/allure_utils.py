"""
================================================================================
Allure Report Utilities
================================================================================

Helpers for enriching the Allure report with scenario evidence and for
post-processing the results directory after a run.

Features:
- Text and screenshot attachment helpers
- Scenario outcome summary from the results directory
- Report generation through the Allure CLI

================================================================================
"""

import json
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_screenshot(path: Union[str, Path], name: str = "Screenshot") -> bool:
    """
    Attach a PNG file written by the driver.

    Returns:
        True when the file existed and was attached
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Screenshot not found, nothing attached: {path}")
        return False
    allure.attach.file(
        str(path),
        name=name,
        attachment_type=allure.attachment_type.PNG
    )
    return True


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class ScenarioResultSummary:
    """Counts of scenario outcomes in an Allure results directory."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Pass rate percentage over executed scenarios."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class AllureReportProcessor:
    """
    Reads Allure results and generates the HTML report.

    Technical errors are reported as skipped scenarios, so the summary keeps
    skipped apart from failed to make environment trouble visible.
    """

    def __init__(self, results_dir: Path, report_dir: Optional[Path] = None):
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir or self.results_dir.parent / "allure-report")

    def parse_results(self) -> List[Dict[str, Any]]:
        results = []
        for result_file in self.results_dir.glob("*-result.json"):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to parse {result_file}: {e}")
        return results

    def generate_summary(self) -> ScenarioResultSummary:
        """
        Generate summary from results.

        Returns:
            ScenarioResultSummary object
        """
        summary = ScenarioResultSummary()
        for result in self.parse_results():
            summary.total += 1
            status = result.get("status", "unknown")
            if status in ("passed", "failed", "broken", "skipped"):
                setattr(summary, status, getattr(summary, status) + 1)
            else:
                summary.unknown += 1
            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)
        return summary

    def generate_report(self) -> bool:
        """
        Generate Allure HTML report.

        Returns:
            True if successful
        """
        cmd = [
            "allure", "generate",
            str(self.results_dir),
            "-o", str(self.report_dir),
            "--clean"
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.warning("Allure CLI not found. Please install Allure to generate reports.")
            return False

        if result.returncode == 0:
            logger.info(f"Report generated at {self.report_dir}")
            return True
        logger.error(f"Report generation failed: {result.stderr}")
        return False


__all__ = [
    "attach_text",
    "attach_screenshot",
    "ScenarioResultSummary",
    "AllureReportProcessor",
]
