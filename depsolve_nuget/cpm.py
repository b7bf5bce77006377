"""
depsolve_nuget/cpm.py
=====================
Central Package Management (Directory.Packages.props) 해석

기능:
1. 상위 디렉토리로 올라가며 Directory.Packages.props 탐색
2. ManagePackageVersionsCentrally 활성화 여부 (Import 체인 포함)
3. PackageVersion 맵 로드
   - Import 먼저 (깊이 우선), 그 다음 파일 자신의 항목
   - 나중 항목이 앞 항목을 덮어씀 (같은 파일 내 중복 포함)
   - 순환 Import는 조용히 중단
4. 솔루션 단위 CPM 루트 선택 (솔루션 디렉토리 → 프로젝트 디렉토리)
5. props 경로별 캐시 (스레드 안전)
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import CaseInsensitiveDict, Solution
from .extensions import (
    PROPS_FILE_NAME, XmlFileError, child_text, iter_elements, normalize_path,
    parse_xml, path_key, resolve_relative,
)

logger = logging.getLogger(__name__)

MSBUILD_THIS_FILE_DIR = re.compile(r"\$\(MSBuildThisFileDirectory\)", re.IGNORECASE)


class CpmParseError(XmlFileError):
    """props 체인 내 잘못된 XML"""


@dataclass
class CpmResolution:
    """CPM 해석 결과"""
    enabled: bool
    props_path: Optional[str] = None
    versions: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)

    def to_dict(self) -> Dict:
        return {
            "enabled": self.enabled,
            "props_path": self.props_path,
            "versions": dict(self.versions.items()),
        }


# =============================================================================
# 파일 탐색 / Import
# =============================================================================

def find_props_file(start_dir) -> Optional[str]:
    """start_dir부터 루트까지 Directory.Packages.props 탐색 (가장 가까운 것)"""
    current = Path(normalize_path(start_dir))
    while True:
        candidate = current / PROPS_FILE_NAME
        if candidate.is_file():
            return str(candidate)
        if current.parent == current:
            return None
        current = current.parent


def import_paths(root, props_path: str) -> List[str]:
    """<Import Project="..."/> 경로 목록 (문서 순서, 절대 경로)"""
    base_dir = Path(props_path).parent
    paths = []
    for element in iter_elements(root, "Import"):
        project = element.get("Project", "")
        if not project.strip():
            continue
        project = MSBUILD_THIS_FILE_DIR.sub(lambda _: str(base_dir) + "/", project)
        if "$(" in project:
            logger.debug("Skipping unevaluated import %s in %s", project, props_path)
            continue
        paths.append(resolve_relative(base_dir, project))
    return paths


def _parse(path: str):
    try:
        return parse_xml(Path(path), CpmParseError)
    except FileNotFoundError:
        return None


# =============================================================================
# 활성화 여부
# =============================================================================

def is_enabled(props_path) -> bool:
    """
    파일 또는 Import된 파일 중 하나가 ManagePackageVersionsCentrally=true인지

    존재하지 않는 파일은 비활성으로 취급. 잘못된 XML은 CpmParseError.
    """
    stack = [normalize_path(props_path)]
    visited = set()

    while stack:
        path = stack.pop()
        key = path_key(path)
        if key in visited:
            continue
        visited.add(key)

        root = _parse(path)
        if root is None:
            logger.debug("Props file not found: %s", path)
            continue

        for element in iter_elements(root, "ManagePackageVersionsCentrally"):
            if (element.text or "").strip().lower() == "true":
                return True

        # 문서 순서대로 방문
        stack.extend(reversed(import_paths(root, path)))

    return False


def check(start_dir) -> Tuple[bool, Optional[str]]:
    """(활성화 여부, props 경로). 경로는 활성화된 경우에만 반환"""
    props_path = find_props_file(start_dir)
    if props_path is None:
        return False, None
    if is_enabled(props_path):
        logger.debug("Central package management enabled by %s", props_path)
        return True, props_path
    return False, None


# =============================================================================
# 버전 맵
# =============================================================================

def _apply_package_versions(root, versions: CaseInsensitiveDict):
    for element in iter_elements(root, "PackageVersion"):
        package_id = element.get("Include") or element.get("Update")
        version = element.get("Version")
        if version is None:
            version = child_text(element, "Version")
        if not package_id or not package_id.strip():
            continue
        if not version or not version.strip():
            continue
        versions[package_id.strip()] = version.strip()


def load_versions(props_path) -> CaseInsensitiveDict:
    """
    PackageVersion 맵 로드 (대소문자 무시 키)

    각 파일의 Import를 먼저 처리하고 자신의 항목으로 덮어쓴다.
    명시적 스택 + 방문 집합으로 순환을 끊는다.
    """
    start = normalize_path(props_path)
    if not Path(start).is_file():
        raise FileNotFoundError(f"{PROPS_FILE_NAME} not found: {start}")

    logger.debug("Loading central package versions from %s", start)

    versions = CaseInsensitiveDict()
    visited = set()
    parsed = {}
    # (경로, 자식 처리 완료 여부)
    stack: List[Tuple[str, bool]] = [(start, False)]

    while stack:
        path, expanded = stack.pop()
        key = path_key(path)

        if expanded:
            _apply_package_versions(parsed.pop(key), versions)
            continue

        if key in visited:
            logger.debug("Import cycle stopped at %s", path)
            continue
        visited.add(key)

        root = _parse(path)
        if root is None:
            logger.debug("Imported props file not found: %s", path)
            continue

        parsed[key] = root
        stack.append((path, True))
        for imported in reversed(import_paths(root, path)):
            stack.append((imported, False))

    logger.debug("Loaded %d central package version(s)", len(versions))
    return versions


def resolve(start_dir) -> CpmResolution:
    """start_dir 기준 CPM 해석 (비활성이면 빈 맵)"""
    enabled, props_path = check(start_dir)
    if not enabled:
        return CpmResolution(enabled=False)
    return CpmResolution(enabled=True, props_path=props_path, versions=load_versions(props_path))


# =============================================================================
# 솔루션 단위 선택
# =============================================================================

def select_solution_root(solution: Solution) -> Tuple[bool, Optional[str]]:
    """
    솔루션 CPM 루트 선택

    1. 솔루션 디렉토리에서 확인
    2. 없으면 각 프로젝트 디렉토리에서 확인
    3. 서로 다른 루트가 여럿이면 가장 짧은 경로 (동률은 대소문자 무시 사전순)
    """
    enabled, props_path = check(solution.directory_path)
    if enabled:
        return True, props_path

    roots: Dict[str, str] = {}
    for project in solution.projects:
        project_enabled, project_props = check(project.directory_path)
        if project_enabled and project_props:
            roots.setdefault(path_key(project_props), project_props)

    if not roots:
        return False, None

    ordered = sorted(roots.values(), key=lambda p: (len(p), p.casefold()))
    if len(ordered) > 1:
        logger.info(
            "Found %d distinct central package management roots, using %s",
            len(ordered), ordered[0],
        )
    return True, ordered[0]


def apply_to_solution(solution: Solution) -> Optional[str]:
    """선택된 CPM 루트를 솔루션에 기록"""
    enabled, props_path = select_solution_root(solution)
    if enabled and props_path:
        solution.enable_central_package_management(props_path)
        return props_path
    solution.disable_central_package_management()
    return None


# =============================================================================
# 캐시
# =============================================================================

class CpmCache:
    """
    props 경로별 버전 맵 캐시

    같은 경로는 한 번만 로드한다 (동시 호출 시에도).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Dict[str, CaseInsensitiveDict] = {}

    def get(self, props_path) -> CaseInsensitiveDict:
        key = path_key(props_path)
        with self._lock:
            if key not in self._versions:
                self._versions[key] = load_versions(props_path)
            return self._versions[key]

    def __len__(self) -> int:
        return len(self._versions)

    def clear(self):
        with self._lock:
            self._versions.clear()


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'CpmParseError', 'CpmResolution', 'CpmCache',
    'find_props_file', 'import_paths', 'is_enabled', 'check',
    'load_versions', 'resolve', 'select_solution_root', 'apply_to_solution',
]
