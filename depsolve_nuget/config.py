"""
depsolve_nuget/config.py
========================
프로젝트 로컬 설정 (.depsolve/config.yaml)

구조:
    exclude_patterns:                  # 추가 제외 글롭
      - "**/Migrations/**"
    namespace_aliases:                 # 패키지 ID → 네임스페이스
      Serilog.AspNetCore: [Serilog]
    dev_dependency_patterns:           # 추가 개발 전용 패턴
      - Analyzers
    treat_global_using_as_used: true
    exclude_dev_dependencies_from_unused: false
    timeout_seconds: 300

파일이 없거나 잘못된 YAML이면 기본값을 사용한다.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .extensions import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CONFIG_DIR = ".depsolve"
CONFIG_FILE = "config.yaml"


def config_path_for(root: Path) -> Path:
    return Path(root) / CONFIG_DIR / CONFIG_FILE


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and str(v).strip()]


@dataclass
class AnalysisConfig:
    """분석 설정"""
    exclude_patterns: List[str] = field(default_factory=list)
    namespace_aliases: Dict[str, List[str]] = field(default_factory=dict)
    dev_dependency_patterns: List[str] = field(default_factory=list)
    treat_global_using_as_used: bool = True
    exclude_dev_dependencies_from_unused: bool = False
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    # 메타데이터
    version: str = "1.0"
    source_path: Optional[str] = None

    @classmethod
    def load(cls, root: Path) -> "AnalysisConfig":
        """root/.depsolve/config.yaml 로드 (없으면 기본값)"""
        config = cls()
        path = config_path_for(root)

        if not path.is_file():
            return config

        try:
            with open(path, encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return config

        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", path)
            return config

        config.source_path = str(path)
        config.version = str(data.get("version", config.version))
        config.exclude_patterns = _as_list(data.get("exclude_patterns"))
        config.dev_dependency_patterns = _as_list(data.get("dev_dependency_patterns"))

        aliases = data.get("namespace_aliases") or {}
        if isinstance(aliases, dict):
            config.namespace_aliases = {
                str(k): _as_list(v) for k, v in aliases.items() if k
            }
        else:
            logger.warning("Ignoring namespace_aliases in %s: expected a mapping", path)

        for key in ("treat_global_using_as_used", "exclude_dev_dependencies_from_unused"):
            if key not in data:
                continue
            # "false" 같은 문자열은 YAML 불리언이 아님
            if isinstance(data[key], bool):
                setattr(config, key, data[key])
            else:
                logger.warning("Ignoring %s in %s: expected true or false, got %r",
                               key, path, data[key])

        if "timeout_seconds" in data:
            timeout = data["timeout_seconds"]
            if isinstance(timeout, int) and not isinstance(timeout, bool) and timeout > 0:
                config.timeout_seconds = timeout
            else:
                logger.warning("Ignoring timeout_seconds in %s: expected a positive integer, got %r",
                               path, timeout)

        logger.debug("Loaded config from %s", path)
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "last_updated": datetime.now().isoformat(timespec="seconds"),
            "exclude_patterns": list(self.exclude_patterns),
            "namespace_aliases": {k: list(v) for k, v in self.namespace_aliases.items()},
            "dev_dependency_patterns": list(self.dev_dependency_patterns),
            "treat_global_using_as_used": self.treat_global_using_as_used,
            "exclude_dev_dependencies_from_unused": self.exclude_dev_dependencies_from_unused,
            "timeout_seconds": self.timeout_seconds,
        }

    def save(self, root: Path) -> Path:
        """설정을 파일로 저장"""
        path = config_path_for(root)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)

        self.source_path = str(path)
        return path


def create_initial_config(root: Path, overwrite: bool = False) -> Path:
    """
    초기 config.yaml 템플릿 생성

    이미 있으면 overwrite=True일 때만 덮어쓴다.
    """
    path = config_path_for(root)
    if path.exists() and not overwrite:
        raise FileExistsError(f"Config already exists: {path}")

    config = AnalysisConfig(
        exclude_patterns=["**/Migrations/**"],
        namespace_aliases={"Serilog.AspNetCore": ["Serilog"]},
    )
    return config.save(root)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'CONFIG_DIR', 'CONFIG_FILE', 'AnalysisConfig',
    'config_path_for', 'create_initial_config',
]
