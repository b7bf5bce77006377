"""
depsolve_nuget/extractor.py
===========================
프로젝트 파일에서 패키지 참조 / 전역 using 추출

규칙:
- <PackageReference Include="..." Version="..."/> (Version 자식 요소도 허용)
- 명시 버전이 항상 중앙 버전보다 우선
- 버전이 없으면 중앙 맵에서 찾고, 없으면 경고 후 건너뜀
- <Using Include="..."/> 는 GlobalUsing으로 수집, 같은 ID의 참조에 플래그
- Condition 속성은 그대로 보존
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from .models import CaseInsensitiveDict, GlobalUsing, PackageReference, Project
from .extensions import (
    DEVELOPMENT_DEPENDENCY_PATTERNS, child_text, iter_elements, matches_any,
    normalize_path, parse_xml,
)
from .loader import ProjectParseError

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """프로젝트 하나의 추출 결과"""
    project_path: str
    references: List[PackageReference] = field(default_factory=list)
    global_usings: List[GlobalUsing] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # 버전을 찾지 못한 패키지 ID

    def apply_to(self, project: Project):
        """프로젝트에 참조 / 전역 using 추가"""
        for global_using in self.global_usings:
            project.add_global_using(global_using)
        for reference in self.references:
            project.add_package_reference(reference)


# =============================================================================
# 추출기
# =============================================================================

class PackageReferenceExtractor:
    """
    MSBuild 프로젝트 XML 파서

    central_versions: CPM 버전 맵 (대소문자 무시 매핑, 없으면 None)
    """

    def __init__(self, central_versions: Optional[Mapping[str, str]] = None):
        if central_versions is not None and not isinstance(central_versions, CaseInsensitiveDict):
            central_versions = CaseInsensitiveDict(dict(central_versions))
        self.central_versions = central_versions

    def extract(self, project_path) -> ExtractionResult:
        path = Path(normalize_path(project_path))
        logger.debug("Extracting package references from %s", path)

        root = parse_xml(path, ProjectParseError)
        result = ExtractionResult(project_path=str(path))

        # 1. 전역 using
        global_ids = set()
        for element in iter_elements(root, "Using"):
            package_id = (element.get("Include") or "").strip()
            if not package_id:
                continue
            result.global_usings.append(GlobalUsing(
                package_id=package_id,
                project_path=str(path),
                condition=element.get("Condition"),
            ))
            global_ids.add(package_id.casefold())

        # 2. 패키지 참조
        for element in iter_elements(root, "PackageReference"):
            package_id = (element.get("Include") or "").strip()
            if not package_id:
                continue

            version = self._resolve_version(element, package_id)
            if version is None:
                logger.warning(
                    "No version found for package %s in %s", package_id, path
                )
                result.skipped.append(package_id)
                continue

            result.references.append(PackageReference(
                package_id=package_id,
                version=version,
                project_path=str(path),
                is_direct=True,
                condition=element.get("Condition"),
                has_global_using=package_id.casefold() in global_ids,
            ))

        logger.debug(
            "Extracted %d package reference(s) and %d global using(s) from %s",
            len(result.references), len(result.global_usings), path.name,
        )
        return result

    def _resolve_version(self, element, package_id: str) -> Optional[str]:
        """명시 버전 → 중앙 버전 → None"""
        version = element.get("Version")
        if version is None:
            version = child_text(element, "Version")
        if version and version.strip():
            return version.strip()

        if self.central_versions is not None and package_id in self.central_versions:
            central = self.central_versions[package_id]
            if central and central.strip():
                return central.strip()

        return None


def extract_package_references(project_path,
                               central_versions: Optional[Mapping[str, str]] = None
                               ) -> ExtractionResult:
    """편의 함수"""
    return PackageReferenceExtractor(central_versions).extract(project_path)


# =============================================================================
# 개발 전용 패키지
# =============================================================================

def is_development_dependency(package_id: str,
                              extra_patterns: Iterable[str] = ()) -> bool:
    """분석기 / 테스트 프레임워크 / 커버리지 도구 여부 (부분 문자열, 대소문자 무시)"""
    if not package_id or not package_id.strip():
        return False
    patterns = list(DEVELOPMENT_DEPENDENCY_PATTERNS) + list(extra_patterns)
    return matches_any(package_id, patterns)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'ExtractionResult', 'PackageReferenceExtractor', 'ProjectParseError',
    'extract_package_references', 'is_development_dependency',
]
