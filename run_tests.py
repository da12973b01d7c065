#!/usr/bin/env python3
# ================================================================================
# Test Runner Script
# ================================================================================
#
# Main entry point for executing the Lightning suites.
#
# Features:
#   - Run framework unit tests, UI scenarios or both
#   - Select the environment, browser and live mode through configuration
#     overrides (ENVIRONMENT, BROWSER__*)
#   - Generate and summarize Allure reports
#   - Pause a running suite by creating a LOCK file in the project root
#
# Usage:
#   python run_tests.py --suite unit
#   python run_tests.py --suite ui --env SIT --live --tags login
#   python run_tests.py --suite all --no-headless --browser firefox
#
# ================================================================================

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List

from loguru import logger

from lightning_tools.report_tools import AllureReportProcessor


# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    level="INFO"
)


SUITE_PATHS = {
    "unit": "lightning_suites/unit",
    "ui": "lightning_suites/ui_testing/tests",
    "all": "lightning_suites",
}


class TestRunner:
    """
    Orchestrates a suite run.

    Scenarios share one browser session, so runs are always sequential.
    """

    def __init__(
        self,
        suite: str = "all",
        tags: List[str] = None,
        environment: str = None,
        live: bool = False,
        browser: str = "chromium",
        headless: bool = True,
        allure_report: bool = True,
        verbose: bool = False
    ):
        """
        Args:
            suite: "unit", "ui" or "all"
            tags: Pytest markers to filter scenarios
            environment: Environment block to run against (DEV, SIT ...)
            live: Run scenarios that need a reachable org
            browser: "chromium", "firefox" or "webkit"
            headless: Run browser in headless mode
            allure_report: Generate Allure report
            verbose: Enable verbose output
        """
        self.suite = suite
        self.tags = tags or []
        self.environment = environment
        self.live = live
        self.browser = browser
        self.headless = headless
        self.allure_report = allure_report
        self.verbose = verbose

        self.root_dir = Path(__file__).parent
        self.reports_dir = self.root_dir / "reports"
        self.allure_results = self.reports_dir / "allure-results"
        self.allure_report_dir = self.reports_dir / "allure-report"

    def run(self) -> int:
        """
        Execute the test run.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        logger.info("=" * 60)
        logger.info("Starting Test Execution")
        logger.info("=" * 60)
        logger.info(f"Suite: {self.suite}")
        logger.info(f"Tags: {self.tags or 'All'}")
        if self.suite in ["ui", "all"]:
            logger.info(f"Environment: {self.environment or 'from config'}")
            logger.info(f"Browser: {self.browser} (headless={self.headless}, live={self.live})")
        logger.info("=" * 60)

        self._prepare_environment()

        cmd = self._build_pytest_command()
        logger.info(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, cwd=str(self.root_dir), env=self._build_env())
            exit_code = result.returncode
        except OSError as e:
            logger.error(f"Test execution failed: {e}")
            exit_code = 1

        if self.allure_report:
            self._generate_allure_report()

        self._print_summary(exit_code)
        return exit_code

    def _prepare_environment(self) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        self.allure_results.mkdir(parents=True, exist_ok=True)
        lock_file = self.root_dir / "LOCK"
        if lock_file.exists():
            logger.warning(f"{lock_file} exists, scenarios will wait until it is removed")

    def _build_env(self) -> Dict[str, str]:
        """Configuration overrides for the pytest process."""
        env = dict(os.environ)
        if self.environment:
            env["ENVIRONMENT"] = self.environment.upper()
        env["BROWSER__TYPE"] = self.browser
        env["BROWSER__HEADLESS"] = str(self.headless).lower()
        if self.live:
            env["BROWSER__LIVE"] = "true"
        return env

    def _build_pytest_command(self) -> List[str]:
        """Build the pytest command with all options."""
        cmd = [sys.executable, "-m", "pytest", SUITE_PATHS[self.suite]]

        if self.tags:
            cmd.extend(["-m", " or ".join(self.tags)])

        if self.allure_report:
            cmd.extend(["--alluredir", str(self.allure_results)])

        cmd.append("-v" if self.verbose else "-q")
        return cmd

    def _generate_allure_report(self) -> None:
        logger.info("Generating Allure report...")
        processor = AllureReportProcessor(self.allure_results, self.allure_report_dir)

        summary = processor.generate_summary()
        logger.info(
            f"Scenarios: {summary.total} | passed {summary.passed} | failed {summary.failed} | "
            f"broken {summary.broken} | skipped {summary.skipped} | pass rate {summary.pass_rate:.1f}%"
        )
        if summary.skipped:
            logger.warning(f"{summary.skipped} scenario(s) skipped, check the run summary for technical errors")

        processor.generate_report()

    def _print_summary(self, exit_code: int) -> None:
        logger.info("=" * 60)
        if exit_code == 0:
            logger.info("✅ TEST EXECUTION COMPLETED SUCCESSFULLY")
        else:
            logger.error(f"❌ TEST EXECUTION FAILED (exit code: {exit_code})")

        if self.allure_report:
            logger.info(f"📊 Report available at: {self.allure_report_dir}")

        logger.info("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Salesforce Lightning UI Automation Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Framework unit tests only
  python run_tests.py --suite unit

  # P0 smoke scenarios against SIT
  python run_tests.py --suite ui --env SIT --live --tags P0 smoke

  # UI scenarios with visible browser
  python run_tests.py --suite ui --live --no-headless --browser firefox
        """
    )

    parser.add_argument(
        "--suite",
        choices=list(SUITE_PATHS),
        default="all",
        help="Test suite to run (default: all)"
    )

    parser.add_argument(
        "--tags",
        nargs="+",
        default=[],
        help="Pytest markers to filter scenarios (e.g., P0 smoke login)"
    )

    parser.add_argument(
        "--env",
        default=None,
        help="Environment to run against (default: from config)"
    )

    parser.add_argument(
        "--live",
        action="store_true",
        help="Run scenarios that need a reachable org"
    )

    parser.add_argument(
        "--browser",
        choices=["chromium", "firefox", "webkit"],
        default="chromium",
        help="Browser for UI tests (default: chromium)"
    )

    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run browser in headed mode (visible)"
    )

    parser.add_argument(
        "--no-allure",
        action="store_true",
        help="Disable Allure report generation"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    runner = TestRunner(
        suite=args.suite,
        tags=args.tags,
        environment=args.env,
        live=args.live,
        browser=args.browser,
        headless=not args.no_headless,
        allure_report=not args.no_allure,
        verbose=args.verbose
    )

    sys.exit(runner.run())


if __name__ == "__main__":
    main()
