"""
depsolve_nuget/models.py
========================
공통 타입 정의 (도메인 모델)

설계 원칙:
- 외부 의존성 없음 (순수 Python 표준 라이브러리만)
- 순환 import 방지 (이 모듈은 다른 모듈을 import하지 않음)
- 경로/패키지 ID 비교는 모두 대소문자 무시 (.NET 관례)
"""

import os
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar,
)


T = TypeVar("T")
U = TypeVar("U")


def _require(value: Optional[str], name: str) -> str:
    """빈 문자열/None 거부"""
    if value is None or not str(value).strip():
        raise ValueError(f"{name} cannot be null or empty")
    return value


def _fold(value: Optional[str]) -> str:
    """대소문자 무시 비교용 키"""
    return (value or "").casefold()


def _append_unique(items: List[str], value: str):
    """대소문자 구분 중복 제거 추가 (원본 순서 유지)"""
    if value not in items:
        items.append(value)


# =============================================================================
# 열거형 (Enums)
# =============================================================================

class TargetType(Enum):
    """분석 대상 종류"""
    SOLUTION = "solution"
    PROJECT = "project"
    DIRECTORY = "directory"


class ErrorCode:
    """기계 판독용 오류 코드"""
    GENERAL = "GENERAL_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    INVALID_PATH = "INVALID_PATH"
    PATH_NOT_FOUND = "PATH_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_SYSTEM = "FILE_SYSTEM_ERROR"
    PARSING = "PARSING_ERROR"
    NO_PROJECTS_FOUND = "NO_PROJECTS_FOUND"
    SOLUTION_LOAD = "SOLUTION_LOAD_ERROR"
    PROJECT_LOAD = "PROJECT_LOAD_ERROR"
    DIRECTORY_LOAD = "DIRECTORY_LOAD_ERROR"
    PACKAGE_LOAD = "PACKAGE_LOAD_ERROR"
    ANALYSIS = "ANALYSIS_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "OPERATION_CANCELLED"
    INTERNAL = "INTERNAL_ERROR"
    UNEXPECTED = "UNEXPECTED_ERROR"


# =============================================================================
# 오류 / 결과 (Result 패턴)
# =============================================================================

class Error:
    """코드 + 메시지로 구성된 오류 값"""

    def __init__(self, code: str, message: str):
        if code is None or message is None:
            raise ValueError("Error code and message are required")
        self.code = code
        self.message = message

    @classmethod
    def create(cls, message: str, code: str = ErrorCode.GENERAL) -> "Error":
        return cls(code, message)

    @classmethod
    def validation(cls, message: str) -> "Error":
        return cls(ErrorCode.VALIDATION, message)

    @classmethod
    def not_found(cls, resource: str) -> "Error":
        return cls(ErrorCode.NOT_FOUND, f"{resource} was not found")

    @classmethod
    def file_system(cls, message: str) -> "Error":
        return cls(ErrorCode.FILE_SYSTEM, message)

    @classmethod
    def parsing(cls, message: str) -> "Error":
        return cls(ErrorCode.PARSING, message)

    @classmethod
    def timeout(cls, message: str = "Operation timed out") -> "Error":
        return cls(ErrorCode.TIMEOUT, message)

    @classmethod
    def cancelled(cls, message: str = "Analysis was cancelled") -> "Error":
        return cls(ErrorCode.CANCELLED, message)

    @classmethod
    def internal(cls, message: str = "An internal error occurred") -> "Error":
        return cls(ErrorCode.INTERNAL, message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return _fold(self.code) == _fold(other.code) and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code.upper(), self.message))

    def __repr__(self) -> str:
        return f"Error({self.code!r}, {self.message!r})"

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class Result(Generic[T]):
    """
    성공/실패 판별 결과

    공개 연산은 예상된 오류(not-found, malformed, validation)를
    예외 대신 Result.failure로 돌려준다.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Error) -> "Result[T]":
        if error is None:
            raise ValueError("A failed result requires an error")
        return cls(error=error)

    @classmethod
    def fail(cls, code: str, message: str) -> "Result[T]":
        return cls.failure(Error(code, message))

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def is_failure(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise RuntimeError(f"Cannot access value of a failed result. Error: {self._error}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise RuntimeError("Cannot access error of a successful result.")
        return self._error

    def map(self, func: Callable[[T], U]) -> "Result[U]":
        if self.is_failure:
            return Result.failure(self._error)
        return Result.success(func(self._value))

    def bind(self, func: Callable[[T], "Result[U]"]) -> "Result[U]":
        if self.is_failure:
            return Result.failure(self._error)
        return func(self._value)

    def value_or(self, default: T) -> T:
        return self._value if self.is_success else default

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        if self.is_success:
            return f"Success: {self._value!r}"
        return f"Failure: {self._error}"


# =============================================================================
# 대소문자 무시 딕셔너리
# =============================================================================

class CaseInsensitiveDict(MutableMapping):
    """
    키를 대소문자 무시로 비교하는 매핑

    마지막으로 기록된 키 표기를 유지한다 (Newtonsoft.Json / NEWTONSOFT.JSON).
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, **kwargs):
        self._store: Dict[str, Tuple[str, Any]] = {}
        self.update(data or {}, **kwargs)

    def __setitem__(self, key: str, value: Any):
        self._store[_fold(key)] = (key, value)

    def __getitem__(self, key: str) -> Any:
        return self._store[_fold(key)][1]

    def __delitem__(self, key: str):
        del self._store[_fold(key)]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self._store

    def copy(self) -> "CaseInsensitiveDict":
        return CaseInsensitiveDict(dict(self.items()))

    def __repr__(self) -> str:
        return f"CaseInsensitiveDict({dict(self.items())!r})"


# =============================================================================
# 네임스페이스 패턴 (Value Object)
# =============================================================================

class NamespacePattern:
    """
    매칭 가능한 네임스페이스 표현식

    - 정확히 일치: "Newtonsoft.Json"
    - 접두사: "System.*"   → "System."으로 시작
    - 접미사: "*.Logging"  → ".Logging"으로 끝남
    - 전체:   "*"          → 비어있지 않은 모든 네임스페이스
    - 다중:   "A*B*C"      → A, B, C가 순서대로 등장

    비교/해시는 모두 대소문자 무시.
    """

    WILDCARD = "*"

    def __init__(self, pattern: str):
        self.pattern = _require(pattern, "Pattern").strip()
        self.is_wildcard = self.WILDCARD in self.pattern
        self.is_exact = not self.is_wildcard
        self._folded = _fold(self.pattern)
        self._parts = [p for p in self._folded.split(self.WILDCARD) if p]

    @classmethod
    def exact(cls, namespace: str) -> "NamespacePattern":
        return cls(namespace)

    @classmethod
    def prefix(cls, prefix: str) -> "NamespacePattern":
        return cls(f"{prefix}*")

    @classmethod
    def suffix(cls, suffix: str) -> "NamespacePattern":
        return cls(f"*{suffix}")

    @classmethod
    def wildcard(cls, pattern: str) -> "NamespacePattern":
        return cls(pattern)

    def matches(self, namespace: Optional[str]) -> bool:
        """네임스페이스가 패턴에 매치되는지 확인"""
        if namespace is None or not namespace.strip():
            return False

        candidate = _fold(namespace)

        if self.is_exact:
            return candidate == self._folded

        # "*", "**" ...
        if not self._parts:
            return True

        star_count = self._folded.count(self.WILDCARD)
        if star_count == 1 and self._folded.endswith(self.WILDCARD):
            return candidate.startswith(self._parts[0])
        if star_count == 1 and self._folded.startswith(self.WILDCARD):
            return candidate.endswith(self._parts[0])

        # 순서 보존 부분 문자열 매칭
        position = 0
        for part in self._parts:
            index = candidate.find(part, position)
            if index == -1:
                return False
            position = index + len(part)
        return True

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            other = NamespacePattern(other) if other.strip() else None
        if not isinstance(other, NamespacePattern):
            return False
        return self._folded == other._folded

    def __hash__(self) -> int:
        return hash(self._folded)

    def __str__(self) -> str:
        return self.pattern

    def __repr__(self) -> str:
        return f"NamespacePattern({self.pattern!r})"


# =============================================================================
# 사용 이벤트 (분석기 → 참조 소유자)
# =============================================================================

@dataclass(frozen=True)
class UsageEvent:
    """
    "이 패키지가 이 파일에서 이 네임스페이스로 사용됨"

    분석기는 참조 객체를 직접 수정하지 않고 이벤트만 모은다.
    프로젝트 참조 목록의 소유자가 스캔 종료 후 한 번에 적용한다.
    """
    package_id: str
    version: str
    file_path: str
    namespace: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (_fold(self.package_id), _fold(self.version))


# =============================================================================
# 엔티티
# =============================================================================

@dataclass(eq=False)
class GlobalUsing:
    """프로젝트 전역 using (<Using Include="..."/>)"""
    package_id: str
    project_path: str
    condition: Optional[str] = None

    def __post_init__(self):
        _require(self.package_id, "Package ID")
        _require(self.project_path, "Project path")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlobalUsing):
            return NotImplemented
        return (_fold(self.package_id) == _fold(other.package_id)
                and _fold(self.project_path) == _fold(other.project_path))

    def __hash__(self) -> int:
        return hash((_fold(self.package_id), _fold(self.project_path)))

    def __str__(self) -> str:
        return f"Global Using: {self.package_id}"


@dataclass(eq=False)
class PackageReference:
    """
    프로젝트 내 선언된 패키지 의존성

    is_used는 False로 시작하고 분석기의 사용 이벤트로만 바뀐다.
    """
    package_id: str
    version: str
    project_path: str
    is_direct: bool = True
    condition: Optional[str] = None
    has_global_using: bool = False
    is_used: bool = field(default=False, init=False)
    usage_locations: List[str] = field(default_factory=list, init=False)
    detected_namespaces: List[str] = field(default_factory=list, init=False)

    def __post_init__(self):
        _require(self.package_id, "Package ID")
        _require(self.version, "Version")
        _require(self.project_path, "Project path")

    @property
    def key(self) -> Tuple[str, str]:
        return (_fold(self.package_id), _fold(self.version))

    def mark_as_used(self, file_path: str, namespace: Optional[str] = None):
        """사용 표시 (파일 경로/네임스페이스는 중복 없이 누적)"""
        _require(file_path, "File path")

        self.is_used = True
        _append_unique(self.usage_locations, file_path)

        if namespace is not None and namespace.strip():
            _append_unique(self.detected_namespaces, namespace)

    def apply(self, event: UsageEvent):
        """사용 이벤트 적용"""
        if event.key != self.key:
            raise ValueError(
                f"Usage event for {event.package_id} {event.version} "
                f"does not belong to {self.package_id} {self.version}"
            )
        self.mark_as_used(event.file_path, event.namespace)

    def mark_as_used_without_location(self):
        """위치 없이 사용 처리 (정책 플래그용)"""
        self.is_used = True

    def reset_usage_status(self):
        """재분석을 위한 초기화"""
        self.is_used = False
        self.usage_locations.clear()
        self.detected_namespaces.clear()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageReference):
            return NotImplemented
        return (self.key == other.key
                and _fold(self.project_path) == _fold(other.project_path))

    def __hash__(self) -> int:
        return hash(self.key + (_fold(self.project_path),))

    def __str__(self) -> str:
        kind = "Direct" if self.is_direct else "Transitive"
        status = "Used" if self.is_used else "Unused"
        return f"{self.package_id} {self.version} ({kind}) - {status}"


@dataclass(eq=False)
class Project:
    """빌드 가능한 단위 (.csproj / .vbproj / .fsproj)"""
    file_path: str
    name: str
    target_framework: str
    package_references: List[PackageReference] = field(default_factory=list)
    global_usings: List[GlobalUsing] = field(default_factory=list)
    source_files: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)
    # TargetFrameworks 전체 (단일이면 [target_framework])
    target_frameworks: List[str] = field(default_factory=list)

    # 생성기가 만드는 파일 (Designer, source generator)
    GENERATED_SUFFIXES = (".designer.cs", ".g.cs", ".g.i.cs")

    def __post_init__(self):
        _require(self.file_path, "File path")
        _require(self.name, "Name")
        _require(self.target_framework, "Target framework")
        if not self.target_frameworks:
            self.target_frameworks = [self.target_framework]

    @property
    def directory_path(self) -> str:
        return os.path.dirname(self.file_path)

    def targets_framework(self, framework: Optional[str]) -> bool:
        """TargetFrameworks 중 하나라도 일치하면 True (대소문자 무시)"""
        wanted = _fold((framework or "").strip())
        return bool(wanted) and any(_fold(f) == wanted for f in self.target_frameworks)

    # -------------------------------------------------------------------------
    # 패키지 참조
    # -------------------------------------------------------------------------

    def add_package_reference(self, reference: PackageReference):
        if reference is None:
            raise ValueError("Package reference is required")
        if reference not in self.package_references:
            self.package_references.append(reference)

    def remove_package_reference(self, reference: PackageReference) -> bool:
        if reference is None:
            raise ValueError("Package reference is required")
        try:
            self.package_references.remove(reference)
            return True
        except ValueError:
            return False

    def get_used_packages(self) -> List[PackageReference]:
        return [p for p in self.package_references if p.is_used]

    def get_unused_packages(self) -> List[PackageReference]:
        return [p for p in self.package_references if not p.is_used]

    # -------------------------------------------------------------------------
    # 전역 using
    # -------------------------------------------------------------------------

    def add_global_using(self, global_using: GlobalUsing):
        if global_using is None:
            raise ValueError("Global using is required")
        if global_using not in self.global_usings:
            self.global_usings.append(global_using)

    def has_global_using_for(self, package_id: str) -> bool:
        wanted = _fold(package_id)
        return any(_fold(g.package_id) == wanted for g in self.global_usings)

    # -------------------------------------------------------------------------
    # 소스 파일 / 제외 규칙
    # -------------------------------------------------------------------------

    def add_source_file(self, file_path: str):
        _require(file_path, "File path")
        _append_unique(self.source_files, file_path)

    def relative_path(self, file_path: str) -> str:
        """프로젝트 디렉토리 아래 파일이면 상대 경로, 아니면 그대로"""
        path = file_path.replace("\\", "/")
        if not os.path.isabs(path):
            return path
        try:
            relative = os.path.relpath(path, self.directory_path)
        except ValueError:
            # 다른 드라이브 (Windows)
            return path
        if relative == ".." or relative.startswith("../") or relative.startswith(".." + os.sep):
            return path
        return relative

    def add_exclude_pattern(self, pattern: str):
        _require(pattern, "Pattern")
        _append_unique(self.exclude_patterns, pattern)

    def should_exclude_file(self, file_path: Optional[str]) -> bool:
        """스캔 제외 여부 (제외 패턴 + 생성 파일)"""
        if file_path is None or not file_path.strip():
            return True

        # 프로젝트 디렉토리 기준 상대 경로로 매칭 (상위 디렉토리 이름 무시)
        relative = self.relative_path(file_path)
        for pattern in self.exclude_patterns:
            if matches_exclude_pattern(relative, pattern):
                return True

        name = _fold(os.path.basename(file_path.replace("\\", "/")))
        return name.endswith(self.GENERATED_SUFFIXES)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return _fold(self.file_path) == _fold(other.file_path)

    def __hash__(self) -> int:
        return hash(_fold(self.file_path))

    def __str__(self) -> str:
        return f"{self.name} ({self.target_framework}) - {len(self.package_references)} packages"


def matches_exclude_pattern(file_path: str, pattern: str) -> bool:
    """
    제외 글롭 매칭 (대소문자 무시)

    - "src/**/Generated": "**" 앞뒤 조각이 모두 경로에 포함되면 매치
    - "**/bin/**" 등 그 외: "*"를 지운 문자열이 경로에 포함되면 매치
    """
    path = _fold(file_path.replace("\\", "/"))
    if not path.startswith("/"):
        path = "/" + path
    folded = _fold(pattern.replace("\\", "/"))

    pieces = folded.split("**")
    if len(pieces) == 2 and pieces[0] and pieces[1]:
        prefix = pieces[0].rstrip("/").replace("*", "")
        suffix = pieces[1].lstrip("/").replace("*", "")
        return prefix in path and suffix in path

    literal = folded.replace("*", "")
    return bool(literal) and literal in path


@dataclass(eq=False)
class Solution:
    """함께 분석되는 프로젝트 묶음 (.sln / .slnx / 가상 솔루션)"""
    file_path: str
    name: str
    is_virtual: bool = False
    projects: List[Project] = field(default_factory=list)
    central_package_management_enabled: bool = field(default=False, init=False)
    directory_packages_props_path: Optional[str] = field(default=None, init=False)

    def __post_init__(self):
        _require(self.file_path, "File path")
        _require(self.name, "Name")

    @property
    def directory_path(self) -> str:
        return os.path.dirname(self.file_path)

    def add_project(self, project: Project):
        if project is None:
            raise ValueError("Project is required")
        if project not in self.projects:
            self.projects.append(project)

    def remove_project(self, project: Project) -> bool:
        if project is None:
            raise ValueError("Project is required")
        try:
            self.projects.remove(project)
            return True
        except ValueError:
            return False

    def enable_central_package_management(self, props_path: str):
        _require(props_path, "Directory.Packages.props path")
        self.central_package_management_enabled = True
        self.directory_packages_props_path = props_path

    def disable_central_package_management(self):
        self.central_package_management_enabled = False
        self.directory_packages_props_path = None

    def get_all_package_references(self) -> List[PackageReference]:
        return [ref for project in self.projects for ref in project.package_references]

    def get_all_used_packages(self) -> List[PackageReference]:
        return [ref for project in self.projects for ref in project.get_used_packages()]

    def get_all_unused_packages(self) -> List[PackageReference]:
        return [ref for project in self.projects for ref in project.get_unused_packages()]

    def get_package_references_grouped_by_id(self) -> CaseInsensitiveDict:
        grouped = CaseInsensitiveDict()
        for ref in self.get_all_package_references():
            if ref.package_id in grouped:
                grouped[ref.package_id].append(ref)
            else:
                grouped[ref.package_id] = [ref]
        return grouped

    def get_package_statistics(self) -> Tuple[int, int, int]:
        """(전체, 사용, 미사용)"""
        refs = self.get_all_package_references()
        used = sum(1 for r in refs if r.is_used)
        return len(refs), used, len(refs) - used

    def find_project_by_path(self, project_path: Optional[str]) -> Optional[Project]:
        if project_path is None or not project_path.strip():
            return None
        wanted = _fold(project_path)
        return next((p for p in self.projects if _fold(p.file_path) == wanted), None)

    def find_project_by_name(self, project_name: Optional[str]) -> Optional[Project]:
        if project_name is None or not project_name.strip():
            return None
        wanted = _fold(project_name)
        return next((p for p in self.projects if _fold(p.name) == wanted), None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Solution):
            return NotImplemented
        return _fold(self.file_path) == _fold(other.file_path)

    def __hash__(self) -> int:
        return hash(_fold(self.file_path))

    def __str__(self) -> str:
        return (f"{self.name} - {len(self.projects)} projects, "
                f"{len(self.get_all_package_references())} packages")


# =============================================================================
# 분석 결과 (리포터 입력)
# =============================================================================

@dataclass
class PackageUsageDetail:
    """패키지 하나의 사용 상세"""
    package_id: str
    version: str
    is_direct: bool
    is_used: bool
    condition: Optional[str] = None
    usage_locations: List[str] = field(default_factory=list)
    detected_namespaces: List[str] = field(default_factory=list)
    has_global_using: bool = False
    is_development_dependency: bool = False

    @classmethod
    def from_reference(cls, ref: PackageReference, is_dev: bool = False) -> "PackageUsageDetail":
        return cls(
            package_id=ref.package_id,
            version=ref.version,
            is_direct=ref.is_direct,
            is_used=ref.is_used,
            condition=ref.condition,
            usage_locations=list(ref.usage_locations),
            detected_namespaces=list(ref.detected_namespaces),
            has_global_using=ref.has_global_using,
            is_development_dependency=is_dev,
        )

    def display(self) -> str:
        kind = "Direct" if self.is_direct else "Transitive"
        status = "Used" if self.is_used else "Unused"
        text = f"{self.package_id} {self.version} ({kind}, {status})"
        if self.condition and self.condition.strip():
            text += f" (Condition: {self.condition})"
        if self.has_global_using:
            text += " [Global Using]"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_id": self.package_id,
            "version": self.version,
            "is_direct": self.is_direct,
            "is_used": self.is_used,
            "condition": self.condition,
            "usage_locations": self.usage_locations,
            "detected_namespaces": self.detected_namespaces,
            "has_global_using": self.has_global_using,
            "is_development_dependency": self.is_development_dependency,
        }


@dataclass
class ProjectAnalysisResult:
    """프로젝트 단위 결과"""
    project_name: str
    project_path: str
    target_framework: str
    unused_packages: List[PackageUsageDetail] = field(default_factory=list)
    used_packages: List[PackageUsageDetail] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.unused_packages) + len(self.used_packages)

    @property
    def unused_count(self) -> int:
        return len(self.unused_packages)

    @property
    def used_count(self) -> int:
        return len(self.used_packages)

    @property
    def unused_percentage(self) -> float:
        total = self.total_count
        return self.unused_count / total * 100 if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "project_path": self.project_path,
            "target_framework": self.target_framework,
            "total_packages": self.total_count,
            "used_packages": self.used_count,
            "unused_packages": self.unused_count,
            "unused": [p.to_dict() for p in self.unused_packages],
            "used": [p.to_dict() for p in self.used_packages],
        }


@dataclass
class PackageUsageReport:
    """솔루션 전체 분석 결과"""
    analyzed_path: str
    elapsed_seconds: float
    project_results: List[ProjectAnalysisResult] = field(default_factory=list)
    solution_name: Optional[str] = None
    central_package_management: bool = False
    directory_packages_props_path: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def total_projects(self) -> int:
        return len(self.project_results)

    @property
    def total_packages(self) -> int:
        return sum(p.total_count for p in self.project_results)

    @property
    def used_packages(self) -> int:
        return sum(p.used_count for p in self.project_results)

    @property
    def unused_packages(self) -> int:
        return sum(p.unused_count for p in self.project_results)

    @property
    def unused_percentage(self) -> float:
        total = self.total_packages
        return self.unused_packages / total * 100 if total else 0.0

    def has_unused_packages(self) -> bool:
        return self.unused_packages > 0

    def get_all_unused(self) -> List[PackageUsageDetail]:
        return [d for p in self.project_results for d in p.unused_packages]

    def get_all_used(self) -> List[PackageUsageDetail]:
        return [d for p in self.project_results for d in p.used_packages]

    def get_unused_grouped_by_id(self) -> CaseInsensitiveDict:
        grouped = CaseInsensitiveDict()
        for detail in self.get_all_unused():
            if detail.package_id in grouped:
                grouped[detail.package_id].append(detail)
            else:
                grouped[detail.package_id] = [detail]
        return grouped

    def summary(self) -> str:
        return (
            f"Analyzed {self.total_projects} project(s) with {self.total_packages} package(s). "
            f"Found {self.unused_packages} unused package(s) ({self.unused_percentage:.1f}%) "
            f"and {self.used_packages} used package(s)."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyzed_path": self.analyzed_path,
            "solution_name": self.solution_name,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "central_package_management": self.central_package_management,
            "directory_packages_props_path": self.directory_packages_props_path,
            "summary": {
                "total_projects": self.total_projects,
                "total_packages": self.total_packages,
                "used_packages": self.used_packages,
                "unused_packages": self.unused_packages,
                "unused_percentage": round(self.unused_percentage, 1),
            },
            "projects": [p.to_dict() for p in self.project_results],
            "warnings": self.warnings,
        }
