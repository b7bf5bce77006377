"""
depsolve_nuget/namespaces.py
============================
패키지 ID → 후보 네임스페이스

휴리스틱 (어셈블리 검사 아님):
- 패키지 ID 자체
- 점으로 구분된 각 접두사 (Microsoft, Microsoft.Extensions, ...)
- 알려진 별칭 (패키지 ID와 다른 루트 네임스페이스를 쓰는 패키지)

별칭 테이블은 NamespaceResolver에 주입 가능하며 설정 파일로 확장된다.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from .models import CaseInsensitiveDict, NamespacePattern


# =============================================================================
# 알려진 별칭
# =============================================================================

KNOWN_NAMESPACE_ALIASES: Dict[str, List[str]] = {
    # 패키지 ID (소문자) → 네임스페이스
    "newtonsoft.json": ["Newtonsoft.Json", "Newtonsoft.Json.Linq"],
    "system.text.json": ["System.Text.Json", "System.Text.Json.Serialization"],
    "microsoft.extensions.logging": [
        "Microsoft.Extensions.Logging",
        "Microsoft.Extensions.DependencyInjection",
    ],
    "spectre.console": ["Spectre.Console", "Spectre.Console.Cli"],
    "xunit": ["Xunit", "Xunit.Abstractions"],
    "moq": ["Moq"],
    "fluentassertions": ["FluentAssertions"],
}


def _dedupe(names: Iterable[str]) -> List[str]:
    """대소문자 무시 중복 제거 (처음 등장한 표기 유지)"""
    seen = set()
    result = []
    for name in names:
        key = name.casefold()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


def dotted_prefixes(package_id: str) -> List[str]:
    """'A.B.C' → ['A', 'A.B', 'A.B.C']"""
    parts = [p for p in package_id.split(".") if p]
    return [".".join(parts[:i]) for i in range(1, len(parts) + 1)]


class NamespaceResolver:
    """
    후보 네임스페이스 계산기

    aliases: 패키지 ID → 네임스페이스 목록 (키 대소문자 무시)
    """

    def __init__(self, aliases: Optional[Mapping[str, Iterable[str]]] = None):
        source = KNOWN_NAMESPACE_ALIASES if aliases is None else aliases
        self.aliases = CaseInsensitiveDict()
        for package_id, namespaces in source.items():
            self.add_alias(package_id, namespaces)

    def add_alias(self, package_id: str, namespaces: Iterable[str]):
        """별칭 추가 (기존 항목에 병합)"""
        if isinstance(namespaces, str):
            namespaces = [namespaces]
        existing = self.aliases.get(package_id, [])
        merged = _dedupe(list(existing) + [n.strip() for n in namespaces if n and n.strip()])
        self.aliases[package_id] = merged

    def extend(self, aliases: Mapping[str, Iterable[str]]) -> "NamespaceResolver":
        for package_id, namespaces in aliases.items():
            self.add_alias(package_id, namespaces)
        return self

    def namespaces_for(self, package_id: str) -> List[str]:
        """후보 네임스페이스 (순서 유지, 대소문자 무시 중복 제거)"""
        if not package_id or not package_id.strip():
            return []
        package_id = package_id.strip()

        candidates = [package_id]
        candidates.extend(dotted_prefixes(package_id))
        candidates.extend(self.aliases.get(package_id, []))
        return _dedupe(candidates)

    def patterns_for(self, package_id: str) -> List[NamespacePattern]:
        return [NamespacePattern(ns) for ns in self.namespaces_for(package_id)]


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'KNOWN_NAMESPACE_ALIASES', 'NamespaceResolver', 'dotted_prefixes',
]
