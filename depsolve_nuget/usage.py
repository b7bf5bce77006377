"""
depsolve_nuget/usage.py
=======================
소스 코드 기반 패키지 사용 분석

기능:
- using 문 추출 (global using, using static, 별칭 using 포함)
- VB Imports / F# open 문 추출
- 정규화된 식별자 (Newtonsoft.Json.JsonConvert.X) 추출
- 후보 네임스페이스 패턴 매칭 → UsageEvent 생성
- 프로젝트별 이벤트 누적 후 한 번에 적용
- 정책: 전역 using = 사용, 개발 전용 패키지 미사용 제외
- 프로젝트 단위 병렬 스캔 (ThreadPoolExecutor)
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .models import PackageReference, Project, Solution, UsageEvent
from .extensions import CancellationToken
from .extractor import is_development_dependency
from .loader import SolutionLoader
from .namespaces import NamespaceResolver

logger = logging.getLogger(__name__)


# =============================================================================
# 네임스페이스 추출 패턴
# =============================================================================

NAMESPACE = r"[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)*"


class Patterns:
    """소스 파일 정규식"""
    # using X.Y;  global using X.Y;  using static X.Y;  using A = X.Y;
    USING = re.compile(
        rf"^\s*(?:global\s+)?using\s+(?:static\s+)?(?:[a-zA-Z_]\w*\s*=\s*)?({NAMESPACE})\s*;",
        re.MULTILINE,
    )
    # Imports X.Y  /  Imports A = X.Y
    VB_IMPORTS = re.compile(
        rf"^\s*Imports\s+(?:[a-zA-Z_]\w*\s*=\s*)?({NAMESPACE})",
        re.MULTILINE | re.IGNORECASE,
    )
    # open X.Y  /  open type X.Y
    FS_OPEN = re.compile(rf"^\s*open\s+(?:type\s+)?({NAMESPACE})", re.MULTILINE)
    # X.Y.Member
    QUALIFIED = re.compile(rf"\b({NAMESPACE})\.")


def extract_namespaces(content: str, file_path: str = "") -> List[str]:
    """소스 본문에서 참조된 네임스페이스 후보 (등장 순서, 중복 제거)"""
    suffix = Path(file_path).suffix.lower() if file_path else ".cs"

    found: Dict[str, None] = {}
    import_patterns = [Patterns.USING]
    if suffix == ".vb":
        import_patterns = [Patterns.VB_IMPORTS]
    elif suffix == ".fs":
        import_patterns = [Patterns.FS_OPEN]

    for pattern in import_patterns + [Patterns.QUALIFIED]:
        for match in pattern.finditer(content):
            found.setdefault(match.group(1), None)

    return list(found)


# =============================================================================
# 사용 이벤트 누적기
# =============================================================================

class UsageAccumulator:
    """프로젝트 하나의 스캔 중 모인 사용 이벤트"""

    def __init__(self, project_path: str):
        self.project_path = project_path
        self.events: List[UsageEvent] = []
        self.warnings: List[str] = []

    def record(self, reference: PackageReference, file_path: str, namespace: Optional[str]):
        self.events.append(UsageEvent(
            package_id=reference.package_id,
            version=reference.version,
            file_path=file_path,
            namespace=namespace,
        ))

    def apply(self, references: Iterable[PackageReference]) -> int:
        """이벤트를 참조에 적용. 적용된 이벤트 수 반환"""
        by_key: Dict = {}
        for reference in references:
            by_key.setdefault(reference.key, []).append(reference)

        applied = 0
        for event in self.events:
            for reference in by_key.get(event.key, []):
                reference.apply(event)
                applied += 1
        return applied


# =============================================================================
# 분석기
# =============================================================================

class PackageUsageAnalyzer:
    """
    패키지 사용 분석기

    정책 플래그:
    - treat_global_using_as_used: 전역 using이 있는 패키지는 텍스트 사용이
      없어도 사용으로 처리 (프로젝트 파일을 위치로 기록)
    - exclude_dev_dependencies_from_unused: 미사용 개발 전용 패키지를
      위치 없이 사용으로 처리
    """

    def __init__(
        self,
        resolver: Optional[NamespaceResolver] = None,
        loader: Optional[SolutionLoader] = None,
        treat_global_using_as_used: bool = True,
        exclude_dev_dependencies_from_unused: bool = False,
        dev_dependency_patterns: Iterable[str] = (),
        max_workers: int = 1,
        cancellation: Optional[CancellationToken] = None,
    ):
        self.cancellation = cancellation or CancellationToken.none()
        self.resolver = resolver or NamespaceResolver()
        self.loader = loader or SolutionLoader(self.cancellation)
        self.treat_global_using_as_used = treat_global_using_as_used
        self.exclude_dev_dependencies_from_unused = exclude_dev_dependencies_from_unused
        self.dev_dependency_patterns = list(dev_dependency_patterns)
        self.max_workers = max(1, max_workers)

    # -------------------------------------------------------------------------
    # 솔루션 / 프로젝트
    # -------------------------------------------------------------------------

    def analyze_solution(self, solution: Solution) -> List[str]:
        """모든 프로젝트 분석. 경고 목록 반환"""
        logger.info("Analyzing package usage for %s", solution.name)

        if self.max_workers == 1 or len(solution.projects) < 2:
            results = [self.analyze_project(p) for p in solution.projects]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self.analyze_project, solution.projects))

        warnings = [w for acc in results for w in acc.warnings]
        total, used, unused = solution.get_package_statistics()
        logger.info("Usage analysis complete: %d used, %d unused of %d", used, unused, total)
        return warnings

    def analyze_project(self, project: Project) -> UsageAccumulator:
        """
        프로젝트 하나 분석

        스캔이 끝난 뒤에만 참조 상태를 바꾼다 (중간 취소 시 이전 상태 유지).
        """
        self.cancellation.check()
        logger.debug("Analyzing package usage for project %s", project.name)

        if not project.source_files:
            self.loader.collect_source_files(project)

        accumulator = self.scan_project(project)

        for reference in project.package_references:
            reference.reset_usage_status()
        accumulator.apply(project.package_references)
        self._apply_policies(project)

        logger.debug(
            "Project %s: %d used, %d unused package(s)",
            project.name, len(project.get_used_packages()), len(project.get_unused_packages()),
        )
        return accumulator

    def scan_project(self, project: Project) -> UsageAccumulator:
        """참조를 수정하지 않고 사용 이벤트만 수집"""
        accumulator = UsageAccumulator(project.file_path)

        patterns = {}
        for reference in project.package_references:
            candidates = self.resolver.patterns_for(reference.package_id)
            if not candidates:
                logger.warning("No namespaces found for package %s", reference.package_id)
            patterns[reference.key] = (reference, candidates)

        if not patterns:
            return accumulator

        for file_path in project.source_files:
            self.cancellation.check()
            if project.should_exclude_file(file_path):
                continue

            content = self._read(file_path, accumulator)
            if content is None:
                continue

            namespaces = extract_namespaces(content, file_path)
            for reference, candidates in patterns.values():
                for namespace in namespaces:
                    if any(c.matches(namespace) for c in candidates):
                        accumulator.record(reference, file_path, namespace)

        return accumulator

    def validate_inputs(self, solution: Optional[Solution]) -> List[str]:
        """분석 전 파일 / 디렉토리 존재 확인. 오류 메시지 목록 반환"""
        if solution is None:
            return ["Solution cannot be null"]

        errors = []
        if not solution.is_virtual and not Path(solution.file_path).is_file():
            errors.append(f"Solution file does not exist: {solution.file_path}")

        for project in solution.projects:
            if not Path(project.file_path).is_file():
                errors.append(f"Project file does not exist: {project.file_path}")
            if not Path(project.directory_path).is_dir():
                errors.append(f"Project directory does not exist: {project.directory_path}")

        return errors

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _read(self, file_path: str, accumulator: UsageAccumulator) -> Optional[str]:
        try:
            return Path(file_path).read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            logger.warning("Error reading source file %s: %s", file_path, e)
            accumulator.warnings.append(f"Could not read {file_path}: {e}")
            return None

    def _apply_policies(self, project: Project):
        for reference in project.package_references:
            if reference.is_used:
                continue

            if self.treat_global_using_as_used and reference.has_global_using:
                reference.mark_as_used(project.file_path, reference.package_id)
                continue

            if (self.exclude_dev_dependencies_from_unused
                    and is_development_dependency(reference.package_id, self.dev_dependency_patterns)):
                reference.mark_as_used_without_location()


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'NAMESPACE', 'Patterns', 'extract_namespaces',
    'UsageAccumulator', 'PackageUsageAnalyzer',
]
