"""
depsolve_nuget - 미사용 NuGet 패키지 분석기
==========================================

기능:
1. 솔루션 로드: .sln, .slnx, 단일 프로젝트, 디렉토리
2. Central Package Management: Directory.Packages.props 체인 해석
3. 패키지 참조 / 전역 using 추출
4. 네임스페이스 기반 사용 분석
5. 리포트: Console, Markdown, JSON

사용법:
    # CLI
    python -m depsolve_nuget analyze ./MySolution.sln
    python -m depsolve_nuget analyze . --format json

    # Python API
    from depsolve_nuget import analyze

    result = analyze("./MySolution.sln")
    if result.is_success:
        print(result.value.summary())
        for detail in result.value.get_all_unused():
            print(detail.display())
"""

__version__ = "0.1.0"

# 모델
from .models import (
    # Enums
    TargetType, ErrorCode,

    # Result
    Error, Result, CaseInsensitiveDict,

    # Entities
    Solution, Project, PackageReference, GlobalUsing,
    NamespacePattern, UsageEvent, matches_exclude_pattern,

    # 결과
    PackageUsageDetail, ProjectAnalysisResult, PackageUsageReport,
)

# 공용
from .extensions import (
    CancellationToken, OperationCancelled, XmlFileError,
    DEFAULT_EXCLUDE_PATTERNS, DEVELOPMENT_DEPENDENCY_PATTERNS,
)

# 로더 / CPM / 추출
from .loader import (
    SolutionLoader, SolutionParseError, ProjectParseError,
    discover_solution_files, discover_project_files,
)
from .cpm import CpmCache, CpmParseError, CpmResolution
from .extractor import (
    ExtractionResult, PackageReferenceExtractor,
    extract_package_references, is_development_dependency,
)

# 사용 분석
from .namespaces import NamespaceResolver, KNOWN_NAMESPACE_ALIASES
from .usage import PackageUsageAnalyzer, UsageAccumulator, extract_namespaces

# 설정
from .config import AnalysisConfig, create_initial_config

# 분석기
from .analyzer import AnalyzeCommand, PackageUsageAnalysis, analyze

# 리포터
from .reporters import (
    ConsoleReporter, MarkdownReporter, JsonReporter,
)

# CLI
from .cli import main as cli_main

__all__ = [
    # Version
    '__version__',

    # Enums
    'TargetType', 'ErrorCode',

    # Models
    'Error', 'Result', 'CaseInsensitiveDict',
    'Solution', 'Project', 'PackageReference', 'GlobalUsing',
    'NamespacePattern', 'UsageEvent', 'matches_exclude_pattern',
    'PackageUsageDetail', 'ProjectAnalysisResult', 'PackageUsageReport',

    # Extensions
    'CancellationToken', 'OperationCancelled', 'XmlFileError',
    'DEFAULT_EXCLUDE_PATTERNS', 'DEVELOPMENT_DEPENDENCY_PATTERNS',

    # Loader / CPM / Extractor
    'SolutionLoader', 'SolutionParseError', 'ProjectParseError',
    'discover_solution_files', 'discover_project_files',
    'CpmCache', 'CpmParseError', 'CpmResolution',
    'ExtractionResult', 'PackageReferenceExtractor',
    'extract_package_references', 'is_development_dependency',

    # Usage
    'NamespaceResolver', 'KNOWN_NAMESPACE_ALIASES',
    'PackageUsageAnalyzer', 'UsageAccumulator', 'extract_namespaces',

    # Config
    'AnalysisConfig', 'create_initial_config',

    # Analyzer
    'AnalyzeCommand', 'PackageUsageAnalysis', 'analyze',

    # Reporters
    'ConsoleReporter', 'MarkdownReporter', 'JsonReporter',

    # CLI
    'cli_main',
]
