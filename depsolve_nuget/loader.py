"""
depsolve_nuget/loader.py
========================
솔루션 / 프로젝트 로더

기능:
- .sln (라인 기반 레거시 형식) 파싱
- .slnx (XML 형식, 기본 XML 네임스페이스 허용) 파싱
- 프로젝트 파일 로드 (TargetFramework / TargetFrameworks)
- 디렉토리 탐색 (최상위 솔루션 파일, 재귀 프로젝트 파일)
- 가상 솔루션 (단일 프로젝트 / 디렉토리)
- 소스 파일 수집 (.cs, .vb, .fs)
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .models import Project, Solution
from .extensions import (
    DEFAULT_EXCLUDE_PATTERNS, DEFAULT_TARGET_FRAMEWORK, PROJECT_EXTENSIONS, SOLUTION_EXTENSIONS,
    SOURCE_EXTENSIONS, XmlFileError, CancellationToken, child_text,
    iter_elements, normalize_path, parse_xml,
    resolve_relative, walk_files,
)

logger = logging.getLogger(__name__)


class SolutionParseError(XmlFileError):
    """솔루션 파일 파싱 실패"""


class ProjectParseError(XmlFileError):
    """프로젝트 파일 파싱 실패"""


# Project("{FAE04EC0-...}") = "Name", "src\Name\Name.csproj", "{GUID}"
SLN_PROJECT_LINE = re.compile(
    r'Project\("\{[^}]+\}"\)\s*=\s*"([^"]+)",\s*"([^"]+)"'
)


# =============================================================================
# 솔루션 파일 파싱
# =============================================================================

def parse_sln_text(content: str, base_dir: Path) -> List[Tuple[str, str]]:
    """
    .sln 본문에서 (프로젝트 이름, 절대 경로) 목록 추출

    솔루션 폴더 항목도 같은 형식이므로 존재 여부 확인은 호출자가 한다.
    """
    entries = []
    for match in SLN_PROJECT_LINE.finditer(content):
        name = match.group(1)
        path = resolve_relative(base_dir, match.group(2))
        entries.append((name, path))
    return entries


def parse_slnx_paths(solution_path: Path) -> List[str]:
    """
    .slnx에서 프로젝트 경로 목록 추출

    <Project Path="..."/> 속성 또는 <Project><Path>...</Path></Project> 자식 요소.
    """
    root = parse_xml(solution_path, SolutionParseError)
    base_dir = solution_path.parent
    paths = []

    for element in iter_elements(root, "Project"):
        relative = child_text(element, "Path")
        if not relative:
            relative = element.get("Path", "")
        if not relative or not relative.strip():
            logger.debug("Skipping project entry without path in %s", solution_path)
            continue
        paths.append(resolve_relative(base_dir, relative))

    return paths


# =============================================================================
# 로더
# =============================================================================

class SolutionLoader:
    """
    솔루션 / 프로젝트 파일을 도메인 모델로 로드

    패키지 참조는 채우지 않는다 (extractor 담당).
    """

    def __init__(self, cancellation: Optional[CancellationToken] = None):
        self.cancellation = cancellation or CancellationToken.none()

    # -------------------------------------------------------------------------
    # 솔루션
    # -------------------------------------------------------------------------

    def load_solution(self, solution_path) -> Solution:
        """.sln / .slnx 로드 (존재하는 프로젝트 파일만 포함)"""
        path = Path(normalize_path(solution_path))
        if not path.is_file():
            raise FileNotFoundError(f"Solution file not found: {path}")

        logger.info("Loading solution: %s", path)
        solution = Solution(file_path=str(path), name=path.stem)

        if path.suffix.lower() == ".slnx":
            project_paths = parse_slnx_paths(path)
        else:
            content = path.read_text(encoding="utf-8-sig", errors="replace")
            project_paths = [p for _, p in parse_sln_text(content, path.parent)]

        for project_path in project_paths:
            self.cancellation.check()
            candidate = Path(project_path)
            if not candidate.is_file():
                logger.debug("Solution entry is not a project file: %s", candidate)
                continue
            solution.add_project(self.load_project(candidate))

        logger.info("Loaded %d project(s) from %s", len(solution.projects), path.name)
        return solution

    # -------------------------------------------------------------------------
    # 프로젝트
    # -------------------------------------------------------------------------

    def load_project(self, project_path) -> Project:
        """프로젝트 파일 로드 (이름 = 파일명, 대상 프레임워크 읽기)"""
        path = Path(normalize_path(project_path))
        root = parse_xml(path, ProjectParseError)
        frameworks = read_target_frameworks(root)

        project = Project(
            file_path=str(path),
            name=path.stem,
            target_framework=frameworks[0],
            target_frameworks=frameworks,
        )
        for pattern in DEFAULT_EXCLUDE_PATTERNS:
            project.add_exclude_pattern(pattern)
        logger.debug("Loaded project %s (%s)", project.name, project.target_framework)
        return project

    def load_virtual_solution_from_project(self, project_path) -> Solution:
        """단일 프로젝트를 감싸는 가상 솔루션"""
        project = self.load_project(project_path)
        path = Path(project.file_path)
        solution = Solution(
            file_path=str(path.with_suffix(".sln")),
            name=f"{path.stem}_Solution",
            is_virtual=True,
        )
        solution.add_project(project)
        return solution

    def load_virtual_solution_from_directory(self, directory) -> Solution:
        """디렉토리 아래 모든 프로젝트를 묶은 가상 솔루션"""
        root = Path(normalize_path(directory))
        if not root.is_dir():
            raise FileNotFoundError(f"Directory not found: {root}")

        name = f"{root.name}_Solution"
        solution = Solution(file_path=str(root / f"{name}.sln"), name=name, is_virtual=True)

        for project_path in discover_project_files(root):
            self.cancellation.check()
            solution.add_project(self.load_project(project_path))

        logger.info("Loaded %d project(s) from directory %s", len(solution.projects), root)
        return solution

    # -------------------------------------------------------------------------
    # 소스 파일
    # -------------------------------------------------------------------------

    def collect_source_files(self, project: Project) -> List[str]:
        """프로젝트 디렉토리 아래 소스 파일 수집 (제외 규칙 적용)"""
        directory = Path(project.directory_path)
        if not directory.is_dir():
            raise FileNotFoundError(f"Project directory not found: {directory}")

        for path in walk_files(directory, SOURCE_EXTENSIONS):
            if project.should_exclude_file(str(path)):
                continue
            project.add_source_file(str(path))

        logger.debug("Found %d source file(s) for %s", len(project.source_files), project.name)
        return project.source_files


def read_target_frameworks(root) -> List[str]:
    """TargetFramework, 없으면 TargetFrameworks의 모든 항목 (문서 순서)"""
    for element in iter_elements(root, "TargetFramework"):
        value = (element.text or "").strip()
        if value:
            return [value]

    for element in iter_elements(root, "TargetFrameworks"):
        frameworks = [f.strip() for f in (element.text or "").split(";") if f.strip()]
        if frameworks:
            return frameworks

    return [DEFAULT_TARGET_FRAMEWORK]


# =============================================================================
# 탐색
# =============================================================================

def discover_solution_files(directory) -> List[Path]:
    """디렉토리 최상위의 솔루션 파일 (정렬)"""
    root = Path(directory)
    return sorted(
        p for p in root.iterdir()
        if p.is_file() and p.suffix.lower() in SOLUTION_EXTENSIONS
    )


def discover_project_files(directory) -> List[Path]:
    """디렉토리 아래 프로젝트 파일 (재귀, bin/obj/.git/.vs/node_modules 제외)"""
    return list(walk_files(Path(directory), PROJECT_EXTENSIONS))


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'SolutionParseError', 'ProjectParseError', 'SLN_PROJECT_LINE',
    'parse_sln_text', 'parse_slnx_paths', 'read_target_frameworks',
    'SolutionLoader', 'discover_solution_files', 'discover_project_files',
]
