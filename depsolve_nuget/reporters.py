"""
depsolve_nuget/reporters.py
===========================
분석 결과 출력

형식:
- Console: ANSI 색상 (NO_COLOR / 비 TTY에서는 비활성)
- Markdown: PR 코멘트 / 문서용
- JSON: 도구 연동용
"""

import json
import os
import sys
from abc import ABC, abstractmethod
from typing import IO, List, Optional

from .models import PackageUsageDetail, PackageUsageReport, ProjectAnalysisResult


class Colors:
    """ANSI 색상 코드"""
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    GRAY = "\033[90m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


# =============================================================================
# 기본 리포터
# =============================================================================

class BaseReporter(ABC):
    """리포터 기본 클래스"""

    def __init__(self, output: Optional[IO[str]] = None):
        self.output = output or sys.stdout

    def write(self, text: str):
        self.output.write(text)

    def writeln(self, text: str = ""):
        self.output.write(text + "\n")

    @abstractmethod
    def report(self, report: PackageUsageReport):
        """분석 결과 출력"""
        pass


# =============================================================================
# 콘솔 리포터
# =============================================================================

class ConsoleReporter(BaseReporter):
    """
    콘솔 출력 리포터

    리포트 구조:
    1. 헤더 (분석 경로, 솔루션, CPM)
    2. 프로젝트별 미사용 패키지 (verbose면 사용 패키지 + 위치)
    3. 요약
    """

    def __init__(
        self,
        output: Optional[IO[str]] = None,
        use_color: bool = True,
        verbose: bool = False
    ):
        super().__init__(output)
        self.verbose = verbose

        self.use_color = use_color
        if os.getenv("NO_COLOR"):
            self.use_color = False
        if hasattr(self.output, 'isatty') and not self.output.isatty():
            self.use_color = False

    def color(self, text: str, color: str) -> str:
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def report(self, report: PackageUsageReport):
        self._report_header(report)

        for project in report.project_results:
            self._report_project(project)

        if report.warnings:
            self.writeln(self.color(f"--- Warnings ({len(report.warnings)}) ---", Colors.BOLD))
            for warning in report.warnings:
                self.writeln(f"  {self.color('!', Colors.YELLOW)} {warning}")
            self.writeln()

        self._report_summary(report)

    def _report_header(self, report: PackageUsageReport):
        self.writeln()
        self.writeln(self.color("=" * 60, Colors.CYAN))
        self.writeln(self.color("  depsolve-nuget Package Usage Report", Colors.BOLD))
        self.writeln(self.color("=" * 60, Colors.CYAN))
        self.writeln(f"  Path:     {report.analyzed_path}")
        if report.solution_name:
            self.writeln(f"  Solution: {report.solution_name}")
        if report.central_package_management:
            self.writeln(f"  CPM:      {report.directory_packages_props_path}")
        self.writeln()

    def _report_project(self, project: ProjectAnalysisResult):
        self.writeln(self.color(
            f"--- {project.project_name} ({project.target_framework}) ---", Colors.BOLD,
        ))

        if project.unused_packages:
            self.writeln(f"  {self.color('x', Colors.RED)} Unused ({project.unused_count}):")
            for detail in project.unused_packages:
                self.writeln(f"    - {detail.display()}")
        else:
            self.writeln(f"  {self.color('v', Colors.GREEN)} No unused packages")

        if self.verbose and project.used_packages:
            self.writeln(f"  {self.color('v', Colors.GREEN)} Used ({project.used_count}):")
            for detail in project.used_packages:
                self.writeln(f"    - {detail.display()}")
                for location in detail.usage_locations[:5]:
                    self.writeln(self.color(f"        {location}", Colors.GRAY))
                if len(detail.usage_locations) > 5:
                    self.writeln(self.color(
                        f"        ... and {len(detail.usage_locations) - 5} more", Colors.GRAY,
                    ))

        self.writeln()

    def _report_summary(self, report: PackageUsageReport):
        self.writeln(self.color("--- Summary ---", Colors.BOLD))
        color = Colors.YELLOW if report.has_unused_packages() else Colors.GREEN
        self.writeln(f"  {self.color(report.summary(), color)}")
        self.writeln(self.color(f"  Completed in {report.elapsed_seconds:.2f}s", Colors.GRAY))
        self.writeln()


# =============================================================================
# Markdown 리포터
# =============================================================================

class MarkdownReporter(BaseReporter):
    """Markdown 형식 리포터"""

    def report(self, report: PackageUsageReport):
        self.writeln("# depsolve-nuget Package Usage Report")
        self.writeln()
        self.writeln(f"- **Path**: {report.analyzed_path}")
        if report.solution_name:
            self.writeln(f"- **Solution**: {report.solution_name}")
        if report.central_package_management:
            self.writeln(f"- **Central package management**: `{report.directory_packages_props_path}`")
        self.writeln()

        self._report_summary(report)

        unused = [p for p in report.project_results if p.unused_packages]
        if unused:
            self.writeln("## Unused Packages")
            self.writeln()
            for project in unused:
                self._report_project(project)

        if report.warnings:
            self.writeln("## Warnings")
            self.writeln()
            for warning in report.warnings:
                self.writeln(f"- {warning}")
            self.writeln()

    def _report_summary(self, report: PackageUsageReport):
        self.writeln("## Summary")
        self.writeln()
        self.writeln("| Metric | Value |")
        self.writeln("|--------|-------|")
        self.writeln(f"| Projects | {report.total_projects} |")
        self.writeln(f"| Packages | {report.total_packages} |")
        self.writeln(f"| Used | {report.used_packages} |")
        self.writeln(f"| Unused | {report.unused_packages} ({report.unused_percentage:.1f}%) |")
        self.writeln()

    def _report_project(self, project: ProjectAnalysisResult):
        self.writeln(f"### {project.project_name} ({project.target_framework})")
        self.writeln()
        self.writeln("| Package | Version | Condition | Dev |")
        self.writeln("|---------|---------|-----------|-----|")
        for detail in project.unused_packages:
            self.writeln(self._row(detail))
        self.writeln()

    @staticmethod
    def _row(detail: PackageUsageDetail) -> str:
        condition = f"`{detail.condition}`" if detail.condition else ""
        dev = "yes" if detail.is_development_dependency else ""
        return f"| {detail.package_id} | {detail.version} | {condition} | {dev} |"


# =============================================================================
# JSON 리포터
# =============================================================================

class JsonReporter(BaseReporter):
    """JSON 형식 리포터"""

    def __init__(self, output: Optional[IO[str]] = None, indent: int = 2):
        super().__init__(output)
        self.indent = indent

    def report(self, report: PackageUsageReport):
        self.writeln(json.dumps(report.to_dict(), indent=self.indent))


REPORTERS = {
    "console": ConsoleReporter,
    "markdown": MarkdownReporter,
    "json": JsonReporter,
}


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'Colors',
    'BaseReporter',
    'ConsoleReporter',
    'MarkdownReporter',
    'JsonReporter',
    'REPORTERS',
]
