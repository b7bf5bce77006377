"""
depsolve_nuget/extensions.py
============================
공용 상수와 헬퍼

핵심 기능:
1. .NET 파일 확장자 / 기본 제외 패턴 / 스킵 디렉토리
2. 경로 정규화 (역슬래시, "..", 대소문자 무시 키)
3. MSBuild XML 읽기 (네임스페이스 무시 태그 매칭)
4. 취소 토큰 (threading.Event + 데드라인)
5. 개발 전용 패키지 (분석기, 테스트 프레임워크) 목록
"""

import os
import threading
import time
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, List, Optional, Type

from .models import matches_exclude_pattern


# =============================================================================
# 파일 종류
# =============================================================================

SOLUTION_EXTENSIONS = (".sln", ".slnx")
PROJECT_EXTENSIONS = (".csproj", ".vbproj", ".fsproj")
SOURCE_EXTENSIONS = (".cs", ".vb", ".fs")

PROPS_FILE_NAME = "Directory.Packages.props"
DEFAULT_TARGET_FRAMEWORK = "net9.0"
DEFAULT_TIMEOUT_SECONDS = 300

# 디렉토리 탐색 시 건너뛰는 디렉토리
SKIP_DIRS = {"bin", "obj", ".git", ".vs", "node_modules"}

# 모든 프로젝트에 적용되는 기본 제외 패턴
DEFAULT_EXCLUDE_PATTERNS = [
    "**/bin/**",
    "**/obj/**",
    "**/.vs/**",
    "**/.git/**",
]


def is_solution_file(path: Path) -> bool:
    return path.suffix.lower() in SOLUTION_EXTENSIONS


def is_project_file(path: Path) -> bool:
    return path.suffix.lower() in PROJECT_EXTENSIONS


# =============================================================================
# 경로 헬퍼
# =============================================================================

def normalize_path(path) -> str:
    """절대 경로 + ".." 정리 + 역슬래시 → OS 구분자"""
    text = str(path).replace("\\", "/")
    return os.path.normpath(os.path.abspath(text))


def path_key(path) -> str:
    """대소문자 무시 경로 비교 키"""
    return normalize_path(path).casefold()


def resolve_relative(base_dir, relative: str) -> str:
    """MSBuild 상대 경로 (역슬래시 허용)를 base_dir 기준으로 해석"""
    return normalize_path(os.path.join(str(base_dir), relative.strip().replace("\\", "/")))


def walk_files(root: Path, extensions, skip_dirs=SKIP_DIRS) -> Iterator[Path]:
    """
    root 아래 파일을 정렬된 순서로 재귀 탐색

    skip_dirs에 속한 디렉토리 (대소문자 무시)는 내려가지 않는다.
    """
    skip = {d.lower() for d in skip_dirs}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d.lower() not in skip)
        for name in sorted(filenames):
            if name.lower().endswith(extensions):
                yield Path(dirpath) / name


# =============================================================================
# MSBuild XML
# =============================================================================

def local_name(tag) -> str:
    """'{http://schemas.microsoft.com/...}PackageReference' → 'PackageReference'"""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_elements(root: ET.Element, name: str) -> Iterator[ET.Element]:
    """네임스페이스와 무관하게 이름이 name인 모든 하위 요소"""
    for element in root.iter():
        if local_name(element.tag) == name:
            yield element


def child_text(element: ET.Element, name: str) -> Optional[str]:
    """직계 자식 요소의 텍스트 (없으면 None)"""
    for child in element:
        if local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def parse_xml(path: Path, error_type: Type[ValueError]) -> ET.Element:
    """
    XML 파일을 파싱해 루트 요소를 반환

    - 파일 없음: FileNotFoundError
    - 잘못된 XML: error_type(path, message)
    """
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return ET.parse(str(path)).getroot()
    except ET.ParseError as e:
        raise error_type(str(path), str(e)) from e


class XmlFileError(ValueError):
    """XML 파싱 실패 (경로 포함)"""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.reason = message


# =============================================================================
# 취소 토큰
# =============================================================================

class OperationCancelled(Exception):
    """취소 또는 시간 초과"""

    def __init__(self, message: str = "Analysis was cancelled", timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


class CancellationToken:
    """
    협조적 취소 토큰

    - cancel(): 다른 스레드에서 취소 요청
    - timeout_seconds: 생성 시점부터의 데드라인
    - parent: 호출자 토큰 (부모가 취소되면 이 토큰도 취소)
    - check(): 취소되었으면 OperationCancelled
    """

    def __init__(self, timeout_seconds: Optional[float] = None,
                 parent: Optional["CancellationToken"] = None):
        self._event = threading.Event()
        self._parent = parent
        self._deadline = None
        if timeout_seconds is not None and timeout_seconds > 0:
            self._deadline = time.monotonic() + timeout_seconds

    @classmethod
    def none(cls) -> "CancellationToken":
        return cls()

    def cancel(self):
        self._event.set()

    @property
    def timed_out(self) -> bool:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return True
        return self._parent is not None and self._parent.timed_out

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set() or self.timed_out:
            return True
        return self._parent is not None and self._parent.is_cancelled

    def check(self):
        if self._parent is not None:
            self._parent.check()
        if self._event.is_set():
            raise OperationCancelled()
        if self.timed_out:
            raise OperationCancelled("Analysis timed out", timed_out=True)


# =============================================================================
# 개발 전용 패키지
# =============================================================================

# 부분 문자열 매칭 (대소문자 무시)
DEVELOPMENT_DEPENDENCY_PATTERNS = [
    # 분석기
    "Microsoft.CodeAnalysis",
    "Microsoft.CodeAnalysis.Analyzers",
    "Microsoft.CodeAnalysis.CSharp",
    "Microsoft.CodeAnalysis.VisualBasic",
    "StyleCop",
    "SonarAnalyzer",

    # 테스트
    "Microsoft.NET.Test.Sdk",
    "xunit",
    "xunit.runner",
    "NUnit",
    "MSTest",
    "Moq",
    "FluentAssertions",

    # 커버리지 / 문서
    "coverlet",
    "ReportGenerator",
    "Swashbuckle",
]


def matches_any(value: str, patterns: List[str]) -> bool:
    """value가 patterns 중 하나를 부분 문자열로 포함하는지 (대소문자 무시)"""
    folded = value.casefold()
    return any(p.casefold() in folded for p in patterns if p)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'SOLUTION_EXTENSIONS', 'PROJECT_EXTENSIONS', 'SOURCE_EXTENSIONS',
    'PROPS_FILE_NAME', 'DEFAULT_TARGET_FRAMEWORK', 'DEFAULT_TIMEOUT_SECONDS',
    'SKIP_DIRS', 'DEFAULT_EXCLUDE_PATTERNS', 'DEVELOPMENT_DEPENDENCY_PATTERNS',
    'is_solution_file', 'is_project_file',
    'normalize_path', 'path_key', 'resolve_relative', 'walk_files',
    'local_name', 'iter_elements', 'child_text', 'parse_xml', 'XmlFileError',
    'OperationCancelled', 'CancellationToken',
    'matches_exclude_pattern', 'matches_any',
]
