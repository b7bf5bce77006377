"""
depsolve_nuget/analyzer.py
==========================
미사용 NuGet 패키지 분석 (오케스트레이션)

단계:
1. 입력 검증
2. 분석 대상 결정 (솔루션 / 프로젝트 / 디렉토리)
3. 도메인 모델 로드 (단일 프로젝트 / 디렉토리 → 가상 솔루션)
4. 제외 패턴 적용
5. 대상 프레임워크 필터
6. CPM 해석 + 패키지 참조 추출
7. 사용 분석
8. 리포트 생성

라이브러리 예외는 이 경계에서 Result.failure(Error)로 바뀐다.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .models import (
    ErrorCode, Error, Result, Solution, TargetType,
    PackageUsageDetail, ProjectAnalysisResult, PackageUsageReport,
)
from .extensions import (
    DEFAULT_EXCLUDE_PATTERNS, XmlFileError, CancellationToken, OperationCancelled,
    is_project_file, is_solution_file, normalize_path,
)
from .loader import SolutionLoader, discover_project_files, discover_solution_files
from .cpm import CpmCache, CpmParseError, apply_to_solution
from .extractor import PackageReferenceExtractor, is_development_dependency
from .namespaces import NamespaceResolver
from .usage import PackageUsageAnalyzer
from .config import AnalysisConfig

logger = logging.getLogger(__name__)


@dataclass
class AnalyzeCommand:
    """분석 요청"""
    path: str
    exclude_patterns: List[str] = field(default_factory=list)
    target_framework: Optional[str] = None
    timeout_seconds: Optional[int] = None  # None이면 설정 파일 / 기본값
    max_workers: int = 1
    use_config: bool = True

    def add_exclude_patterns(self, patterns):
        for pattern in patterns or []:
            if pattern and pattern.strip() and pattern not in self.exclude_patterns:
                self.exclude_patterns.append(pattern)


class _StepFailed(Exception):
    """단계 실패 (run 내부 전용)"""

    def __init__(self, error: Error):
        super().__init__(error.message)
        self.error = error


class PackageUsageAnalysis:
    """
    분석 파이프라인

    run()은 예외를 밖으로 던지지 않는다.
    실행 간 공유 상태 없음 (CPM 캐시도 run마다 새로 만든다).
    """

    def run(self, command: AnalyzeCommand,
            cancellation: Optional[CancellationToken] = None) -> Result:
        """분석 실행 → Result[PackageUsageReport]"""
        started = time.monotonic()

        try:
            # 1. 검증
            self._validate(command)

            # 2. 대상 결정
            target_type, target = self._determine_target(command.path)
            root_dir = target if target.is_dir() else target.parent

            config = AnalysisConfig.load(root_dir) if command.use_config else AnalysisConfig()
            timeout = command.timeout_seconds or config.timeout_seconds
            if timeout <= 0:
                raise _StepFailed(Error.validation("Timeout must be a positive number of seconds"))
            token = CancellationToken(timeout, parent=cancellation)

            logger.info("Analyzing %s %s (timeout %ss)", target_type.value, target, timeout)

            # 3. 로드
            loader = SolutionLoader(token)
            solution = self._load(loader, target_type, target)

            # 4. 제외 패턴
            self._apply_exclude_patterns(solution, command.exclude_patterns + config.exclude_patterns)

            # 5. 대상 프레임워크
            if command.target_framework:
                self._filter_target_framework(solution, command.target_framework)

            # 6. 패키지 참조
            warnings = self._load_package_references(solution, token, CpmCache())

            # 7. 사용 분석
            resolver = NamespaceResolver().extend(config.namespace_aliases)
            usage = PackageUsageAnalyzer(
                resolver=resolver,
                loader=loader,
                treat_global_using_as_used=config.treat_global_using_as_used,
                exclude_dev_dependencies_from_unused=config.exclude_dev_dependencies_from_unused,
                dev_dependency_patterns=config.dev_dependency_patterns,
                max_workers=command.max_workers,
                cancellation=token,
            )
            warnings.extend(self._run_usage_analysis(usage, solution))

            # 8. 리포트
            report = self._build_report(
                command, solution, time.monotonic() - started, warnings,
                config.dev_dependency_patterns,
            )
            logger.info(report.summary())
            return Result.success(report)

        except _StepFailed as e:
            logger.error("Analysis failed: %s", e.error)
            return Result.failure(e.error)
        except OperationCancelled as e:
            logger.warning("Analysis cancelled: %s", e)
            message = str(e) if e.timed_out else "Analysis was cancelled"
            return Result.failure(Error(ErrorCode.CANCELLED, message))
        except Exception as e:
            logger.exception("Unexpected error during analysis")
            return Result.failure(Error(ErrorCode.UNEXPECTED, f"Unexpected error: {e}"))

    # -------------------------------------------------------------------------
    # 1 ~ 2. 검증 / 대상 결정
    # -------------------------------------------------------------------------

    def _validate(self, command: AnalyzeCommand):
        if command is None:
            raise _StepFailed(Error.validation("Command is required"))
        if not command.path or not command.path.strip():
            raise _StepFailed(Error(ErrorCode.INVALID_PATH, "Path is required"))
        if command.timeout_seconds is not None and command.timeout_seconds <= 0:
            raise _StepFailed(Error.validation("Timeout must be a positive number of seconds"))
        if command.max_workers < 1:
            raise _StepFailed(Error.validation("max_workers must be at least 1"))

    def _determine_target(self, raw_path: str) -> Tuple[TargetType, Path]:
        path = Path(normalize_path(raw_path.strip()))

        if not path.exists():
            raise _StepFailed(Error(ErrorCode.PATH_NOT_FOUND, f"Path not found: {path}"))

        if path.is_file():
            if is_solution_file(path):
                return TargetType.SOLUTION, path
            if is_project_file(path):
                return TargetType.PROJECT, path
            raise _StepFailed(Error(
                ErrorCode.INVALID_PATH,
                f"Unsupported file type: {path.suffix} (expected .sln, .slnx or a project file)",
            ))

        solutions = discover_solution_files(path)
        if solutions:
            if len(solutions) > 1:
                logger.info("Multiple solution files found, using %s", solutions[0].name)
            return TargetType.SOLUTION, solutions[0]

        if discover_project_files(path):
            return TargetType.DIRECTORY, path

        raise _StepFailed(Error(
            ErrorCode.NO_PROJECTS_FOUND, f"No solution or project files found in {path}",
        ))

    # -------------------------------------------------------------------------
    # 3. 로드
    # -------------------------------------------------------------------------

    def _load(self, loader: SolutionLoader, target_type: TargetType, target: Path) -> Solution:
        codes = {
            TargetType.SOLUTION: ErrorCode.SOLUTION_LOAD,
            TargetType.PROJECT: ErrorCode.PROJECT_LOAD,
            TargetType.DIRECTORY: ErrorCode.DIRECTORY_LOAD,
        }
        try:
            if target_type == TargetType.SOLUTION:
                solution = loader.load_solution(target)
            elif target_type == TargetType.PROJECT:
                solution = loader.load_virtual_solution_from_project(target)
            else:
                solution = loader.load_virtual_solution_from_directory(target)
        except FileNotFoundError as e:
            raise _StepFailed(Error(ErrorCode.FILE_NOT_FOUND, str(e)))
        except XmlFileError as e:
            raise _StepFailed(Error.parsing(f"Failed to parse {e.path}: {e.reason}"))
        except OSError as e:
            raise _StepFailed(Error(codes[target_type], f"Failed to load {target}: {e}"))

        if not solution.projects:
            raise _StepFailed(Error(ErrorCode.NO_PROJECTS_FOUND, f"No projects found in {target}"))
        return solution

    # -------------------------------------------------------------------------
    # 4 ~ 5. 제외 / 필터
    # -------------------------------------------------------------------------

    def _apply_exclude_patterns(self, solution: Solution, patterns: List[str]):
        for project in solution.projects:
            for pattern in DEFAULT_EXCLUDE_PATTERNS + patterns:
                if pattern and pattern.strip():
                    project.add_exclude_pattern(pattern)

    def _filter_target_framework(self, solution: Solution, framework: str):
        for project in list(solution.projects):
            if not project.targets_framework(framework):
                logger.debug("Skipping %s (%s)", project.name, ";".join(project.target_frameworks))
                solution.remove_project(project)

        if not solution.projects:
            raise _StepFailed(Error(
                ErrorCode.NO_PROJECTS_FOUND, f"No projects target framework {framework}",
            ))

    # -------------------------------------------------------------------------
    # 6. 패키지 참조
    # -------------------------------------------------------------------------

    def _load_package_references(self, solution: Solution, token: CancellationToken,
                                 cpm_cache: CpmCache) -> List[str]:
        warnings = []
        try:
            props_path = apply_to_solution(solution)
            central = cpm_cache.get(props_path) if props_path else None
            if props_path:
                logger.info("Using central package versions from %s", props_path)

            extractor = PackageReferenceExtractor(central)
            for project in solution.projects:
                token.check()
                result = extractor.extract(project.file_path)
                result.apply_to(project)
                for package_id in result.skipped:
                    warnings.append(f"No version found for package {package_id} in {project.name}")

        except FileNotFoundError as e:
            raise _StepFailed(Error(ErrorCode.FILE_NOT_FOUND, str(e)))
        except (CpmParseError, XmlFileError) as e:
            raise _StepFailed(Error.parsing(f"Failed to parse {e.path}: {e.reason}"))
        except OSError as e:
            raise _StepFailed(Error(ErrorCode.PACKAGE_LOAD, f"Failed to load package references: {e}"))

        return warnings

    # -------------------------------------------------------------------------
    # 7. 사용 분석
    # -------------------------------------------------------------------------

    def _run_usage_analysis(self, usage: PackageUsageAnalyzer, solution: Solution) -> List[str]:
        errors = usage.validate_inputs(solution)
        if errors:
            raise _StepFailed(Error.validation("; ".join(errors)))

        try:
            return usage.analyze_solution(solution)
        except OSError as e:
            raise _StepFailed(Error(ErrorCode.ANALYSIS, f"Package usage analysis failed: {e}"))

    # -------------------------------------------------------------------------
    # 8. 리포트
    # -------------------------------------------------------------------------

    def _build_report(self, command: AnalyzeCommand, solution: Solution, elapsed: float,
                      warnings: List[str], dev_patterns: List[str]) -> PackageUsageReport:
        report = PackageUsageReport(
            analyzed_path=command.path,
            elapsed_seconds=elapsed,
            solution_name=solution.name,
            central_package_management=solution.central_package_management_enabled,
            directory_packages_props_path=solution.directory_packages_props_path,
            warnings=warnings,
        )

        for project in solution.projects:
            result = ProjectAnalysisResult(
                project_name=project.name,
                project_path=project.file_path,
                target_framework=project.target_framework,
            )
            for reference in project.package_references:
                detail = PackageUsageDetail.from_reference(
                    reference, is_development_dependency(reference.package_id, dev_patterns),
                )
                if reference.is_used:
                    result.used_packages.append(detail)
                else:
                    result.unused_packages.append(detail)
            report.project_results.append(result)

        return report


def analyze(
    path: str,
    exclude_patterns: Optional[List[str]] = None,
    target_framework: Optional[str] = None,
    timeout_seconds: Optional[int] = None,
    max_workers: int = 1,
    use_config: bool = True,
) -> Result:
    """
    분석 편의 함수

    Returns:
        Result[PackageUsageReport]
    """
    command = AnalyzeCommand(
        path=str(path),
        exclude_patterns=list(exclude_patterns or []),
        target_framework=target_framework,
        timeout_seconds=timeout_seconds,
        max_workers=max_workers,
        use_config=use_config,
    )
    return PackageUsageAnalysis().run(command)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'AnalyzeCommand',
    'PackageUsageAnalysis',
    'analyze',
]
