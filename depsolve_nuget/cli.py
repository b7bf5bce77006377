#!/usr/bin/env python3
"""
depsolve_nuget/cli.py
=====================
depsolve-nuget CLI

Usage:
    python -m depsolve_nuget analyze ./MySolution.sln
    python -m depsolve_nuget analyze . --format json --output report.json
    python -m depsolve_nuget analyze src/App/App.csproj --exclude "**/Generated/**"
    python -m depsolve_nuget namespaces Newtonsoft.Json
    python -m depsolve_nuget cpm .
    python -m depsolve_nuget init .

종료 코드:
    0  성공
    1  잘못된 인자
    2  파일 없음
    3  디렉토리 없음
    5  분석 실패
    130 취소 / 시간 초과
    99 예기치 않은 오류
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .analyzer import AnalyzeCommand, PackageUsageAnalysis
from .config import AnalysisConfig, create_initial_config
from .cpm import CpmParseError, resolve
from .models import ErrorCode, Error
from .namespaces import NamespaceResolver
from .reporters import REPORTERS, ConsoleReporter

logger = logging.getLogger(__name__)


class ExitCode:
    SUCCESS = 0
    INVALID_ARGUMENT = 1
    FILE_NOT_FOUND = 2
    DIRECTORY_NOT_FOUND = 3
    OPERATION_FAILED = 5
    CANCELLED = 130
    UNEXPECTED = 99


def exit_code_for(error: Error, path: str = "") -> int:
    """오류 코드 → 종료 코드"""
    if error.code in (ErrorCode.INVALID_PATH, ErrorCode.VALIDATION):
        return ExitCode.INVALID_ARGUMENT
    if error.code == ErrorCode.FILE_NOT_FOUND:
        return ExitCode.FILE_NOT_FOUND
    if error.code == ErrorCode.PATH_NOT_FOUND:
        return ExitCode.FILE_NOT_FOUND if Path(path).suffix else ExitCode.DIRECTORY_NOT_FOUND
    if error.code == ErrorCode.CANCELLED:
        return ExitCode.CANCELLED
    if error.code == ErrorCode.UNEXPECTED:
        return ExitCode.UNEXPECTED
    return ExitCode.OPERATION_FAILED


def print_error(message: str):
    print(f"Error: {message}", file=sys.stderr)


# =============================================================================
# Commands
# =============================================================================

def cmd_analyze(args):
    """미사용 패키지 분석"""
    command = AnalyzeCommand(
        path=args.path,
        target_framework=args.framework,
        timeout_seconds=args.timeout,
        max_workers=args.workers,
        use_config=not args.no_config,
    )
    command.add_exclude_patterns(args.exclude)

    result = PackageUsageAnalysis().run(command)
    if result.is_failure:
        print_error(result.error.message)
        return exit_code_for(result.error, args.path)

    report = result.value

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            reporter = REPORTERS[args.format](output=f)
            reporter.report(report)
        if args.format != 'json':
            print(f"Report written to {args.output}")
        return ExitCode.SUCCESS

    if args.format == 'console':
        reporter = ConsoleReporter(use_color=not args.no_color, verbose=args.verbose)
    else:
        reporter = REPORTERS[args.format]()
    reporter.report(report)
    return ExitCode.SUCCESS


def cmd_namespaces(args):
    """패키지 후보 네임스페이스 출력"""
    config = AnalysisConfig.load(Path(args.config_root))
    resolver = NamespaceResolver().extend(config.namespace_aliases)
    namespaces = resolver.namespaces_for(args.package_id)

    if not namespaces:
        print_error("Package id is required")
        return ExitCode.INVALID_ARGUMENT

    if args.json:
        print(json.dumps({"package_id": args.package_id, "namespaces": namespaces}, indent=2))
    else:
        for namespace in namespaces:
            print(namespace)
    return ExitCode.SUCCESS


def cmd_cpm(args):
    """Central Package Management 해석 결과 출력"""
    directory = Path(args.path).resolve()
    if not directory.is_dir():
        print_error(f"Directory not found: {directory}")
        return ExitCode.DIRECTORY_NOT_FOUND

    try:
        resolution = resolve(directory)
    except CpmParseError as e:
        print_error(f"Failed to parse {e.path}: {e.reason}")
        return ExitCode.OPERATION_FAILED

    if args.json:
        print(json.dumps(resolution.to_dict(), indent=2))
        return ExitCode.SUCCESS

    if not resolution.enabled:
        print("Central package management: disabled")
        return ExitCode.SUCCESS

    print("Central package management: enabled")
    print(f"  {resolution.props_path}")
    for package_id, version in sorted(resolution.versions.items(), key=lambda kv: kv[0].lower()):
        print(f"  {package_id} = {version}")
    return ExitCode.SUCCESS


def cmd_init(args):
    """.depsolve/config.yaml 템플릿 생성"""
    root = Path(args.path).resolve()
    if not root.is_dir():
        print_error(f"Directory not found: {root}")
        return ExitCode.DIRECTORY_NOT_FOUND

    try:
        path = create_initial_config(root, overwrite=args.force)
    except FileExistsError as e:
        print_error(f"{e} (use --force to overwrite)")
        return ExitCode.INVALID_ARGUMENT

    print(f"Created {path}")
    return ExitCode.SUCCESS


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='depsolve-nuget',
        description='미사용 NuGet 패키지 분석기'
    )
    parser.add_argument('--version', action='version', version=__version__)

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # analyze
    p_analyze = subparsers.add_parser('analyze', help='미사용 패키지 분석')
    p_analyze.add_argument('path', nargs='?', default='.', help='솔루션 / 프로젝트 / 디렉토리 경로')
    p_analyze.add_argument('--exclude', '-e', action='append', default=[],
                           help='제외 글롭 (반복 가능)')
    p_analyze.add_argument('--framework', help='대상 프레임워크 필터 (예: net8.0)')
    p_analyze.add_argument('--format', '-f', choices=sorted(REPORTERS), default='console',
                           help='출력 형식')
    p_analyze.add_argument('--output', '-o', help='리포트 파일 경로')
    p_analyze.add_argument('--timeout', type=int, help='시간 제한 (초)')
    p_analyze.add_argument('--workers', type=int, default=1, help='프로젝트 병렬 스캔 수')
    p_analyze.add_argument('--no-config', action='store_true', help='.depsolve/config.yaml 무시')
    p_analyze.add_argument('--no-color', action='store_true', help='색상 비활성화')
    p_analyze.add_argument('--verbose', '-v', action='store_true', help='상세 출력')

    # namespaces
    p_ns = subparsers.add_parser('namespaces', help='패키지 후보 네임스페이스')
    p_ns.add_argument('package_id', help='패키지 ID')
    p_ns.add_argument('--config-root', default='.', help='config.yaml 위치')
    p_ns.add_argument('--json', action='store_true', help='JSON 출력')
    p_ns.add_argument('--verbose', '-v', action='store_true')

    # cpm
    p_cpm = subparsers.add_parser('cpm', help='Central Package Management 해석')
    p_cpm.add_argument('path', nargs='?', default='.', help='시작 디렉토리')
    p_cpm.add_argument('--json', action='store_true', help='JSON 출력')
    p_cpm.add_argument('--verbose', '-v', action='store_true')

    # init
    p_init = subparsers.add_parser('init', help='config.yaml 템플릿 생성')
    p_init.add_argument('path', nargs='?', default='.', help='프로젝트 루트')
    p_init.add_argument('--force', action='store_true', help='기존 파일 덮어쓰기')
    p_init.add_argument('--verbose', '-v', action='store_true')

    return parser


def main(argv=None):
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse 오류는 2로 종료하지만 여기서는 잘못된 인자 = 1
        return ExitCode.SUCCESS if e.code == 0 else ExitCode.INVALID_ARGUMENT

    if not args.command:
        parser.print_help()
        return ExitCode.SUCCESS

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    if args.verbose:
        logging.getLogger("depsolve_nuget").setLevel(logging.DEBUG)

    commands = {
        'analyze': cmd_analyze,
        'namespaces': cmd_namespaces,
        'cpm': cmd_cpm,
        'init': cmd_init,
    }

    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print_error("Analysis was cancelled")
        return ExitCode.CANCELLED
    except OSError as e:
        print_error(str(e))
        return ExitCode.OPERATION_FAILED
    except Exception as e:
        logger.exception("Unexpected error")
        print_error(f"Unexpected error: {e}")
        return ExitCode.UNEXPECTED


if __name__ == '__main__':
    sys.exit(main())
