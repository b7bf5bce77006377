#!/usr/bin/env python3
"""
depsolve_nuget/tests.py
=======================
통합 테스트

실행:
    python -m depsolve_nuget.tests
    pytest
"""

import contextlib
import io
import json
import tempfile
import textwrap
import time
import unittest
from pathlib import Path
from unittest import mock

from . import cpm
from . import analyzer as analyzer_module
from .models import (
    CaseInsensitiveDict, Error, ErrorCode, GlobalUsing, NamespacePattern,
    PackageReference, PackageUsageDetail, Project, Result, Solution, UsageEvent,
    matches_exclude_pattern,
)
from .extensions import CancellationToken, OperationCancelled
from .loader import (
    ProjectParseError, SolutionLoader, SolutionParseError,
    discover_project_files, discover_solution_files,
)
from .extractor import PackageReferenceExtractor, is_development_dependency
from .namespaces import NamespaceResolver
from .usage import PackageUsageAnalyzer, extract_namespaces
from .config import AnalysisConfig, config_path_for, create_initial_config
from .analyzer import AnalyzeCommand, PackageUsageAnalysis, analyze
from .reporters import ConsoleReporter, JsonReporter, MarkdownReporter
from .cli import main as cli_main


def write(path: Path, content: str) -> Path:
    """파일 생성 (상위 디렉토리 포함)"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding='utf-8')
    return path


def csproj(items: str = "", framework: str = "<TargetFramework>net8.0</TargetFramework>") -> str:
    return f"""
    <Project Sdk="Microsoft.NET.Sdk">
      <PropertyGroup>
        {framework}
      </PropertyGroup>
      <ItemGroup>
        {items}
      </ItemGroup>
    </Project>
    """


def props(items: str = "", enabled: str = "true", imports: str = "") -> str:
    return f"""
    <Project>
      {imports}
      <PropertyGroup>
        <ManagePackageVersionsCentrally>{enabled}</ManagePackageVersionsCentrally>
      </PropertyGroup>
      <ItemGroup>
        {items}
      </ItemGroup>
    </Project>
    """


class TempDirTestCase(unittest.TestCase):
    """임시 디렉토리 기반 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()


# =============================================================================
# 도메인 모델
# =============================================================================

class TestNamespacePattern(unittest.TestCase):
    """네임스페이스 패턴 테스트"""

    def test_exact_is_case_insensitive(self):
        pattern = NamespacePattern("Newtonsoft.Json")
        self.assertTrue(pattern.is_exact)
        self.assertFalse(pattern.is_wildcard)
        self.assertTrue(pattern.matches("newtonsoft.json"))
        self.assertFalse(pattern.matches("Newtonsoft.Json.Linq"))

    def test_prefix(self):
        pattern = NamespacePattern("System.*")
        self.assertTrue(pattern.is_wildcard)
        self.assertTrue(pattern.matches("System.Text.Json"))
        self.assertTrue(pattern.matches("system.IO"))
        self.assertFalse(pattern.matches("System"))
        self.assertFalse(pattern.matches("MySystem.IO"))

    def test_suffix(self):
        pattern = NamespacePattern("*.Logging")
        self.assertTrue(pattern.matches("Microsoft.Extensions.Logging"))
        self.assertFalse(pattern.matches("Logging.Core"))

    def test_bare_wildcard(self):
        pattern = NamespacePattern("*")
        self.assertTrue(pattern.matches("Anything"))
        self.assertFalse(pattern.matches(""))
        self.assertFalse(pattern.matches("   "))
        self.assertFalse(pattern.matches(None))

    def test_multi_part_order(self):
        self.assertTrue(NamespacePattern("A*B*C").matches("AxxBxxC"))
        self.assertFalse(NamespacePattern("A*B*C").matches("CBA"))

        pattern = NamespacePattern("Microsoft.*.Logging")
        self.assertTrue(pattern.matches("Microsoft.Extensions.Logging"))
        self.assertFalse(pattern.matches("Microsoft.Logging"))

    def test_blank_pattern_rejected(self):
        with self.assertRaises(ValueError):
            NamespacePattern("  ")

    def test_factories_and_equality(self):
        self.assertEqual(NamespacePattern.prefix("System.").pattern, "System.*")
        self.assertEqual(NamespacePattern.suffix(".Logging").pattern, "*.Logging")
        self.assertEqual(NamespacePattern("  Foo  ").pattern, "Foo")
        self.assertEqual(NamespacePattern("Foo.*"), NamespacePattern("foo.*"))
        self.assertEqual(hash(NamespacePattern("Foo.*")), hash(NamespacePattern("FOO.*")))


class TestPackageReference(unittest.TestCase):
    """패키지 참조 엔티티 테스트"""

    def make(self, package_id="Newtonsoft.Json", version="13.0.3", path="/src/App/App.csproj"):
        return PackageReference(package_id=package_id, version=version, project_path=path)

    def test_required_fields(self):
        with self.assertRaises(ValueError):
            self.make(package_id=" ")
        with self.assertRaises(ValueError):
            self.make(version="")
        with self.assertRaises(ValueError):
            self.make(path="")

    def test_starts_unused(self):
        ref = self.make()
        self.assertFalse(ref.is_used)
        self.assertTrue(ref.is_direct)
        self.assertEqual(ref.usage_locations, [])

    def test_mark_as_used_deduplicates(self):
        ref = self.make()
        ref.mark_as_used("/src/App/A.cs", "Newtonsoft.Json")
        ref.mark_as_used("/src/App/A.cs", "Newtonsoft.Json")
        ref.mark_as_used("/src/App/B.cs", " ")

        self.assertTrue(ref.is_used)
        self.assertEqual(ref.usage_locations, ["/src/App/A.cs", "/src/App/B.cs"])
        self.assertEqual(ref.detected_namespaces, ["Newtonsoft.Json"])

    def test_mark_as_used_requires_path(self):
        with self.assertRaises(ValueError):
            self.make().mark_as_used("")

    def test_reset(self):
        ref = self.make()
        ref.mark_as_used("/a.cs", "Newtonsoft.Json")
        ref.reset_usage_status()
        self.assertFalse(ref.is_used)
        self.assertEqual(ref.usage_locations, [])
        self.assertEqual(ref.detected_namespaces, [])

    def test_identity_case_insensitive(self):
        a = self.make()
        b = self.make(package_id="NEWTONSOFT.JSON", path="/SRC/App/App.csproj")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, self.make(version="12.0.0"))

    def test_apply_event(self):
        ref = self.make()
        ref.apply(UsageEvent("newtonsoft.json", "13.0.3", "/a.cs", "Newtonsoft.Json"))
        self.assertTrue(ref.is_used)

        with self.assertRaises(ValueError):
            ref.apply(UsageEvent("Serilog", "3.1.1", "/a.cs"))


class TestProject(unittest.TestCase):
    """프로젝트 엔티티 테스트"""

    def setUp(self):
        self.project = Project(file_path="/src/App/App.csproj", name="App", target_framework="net8.0")

    def test_directory_path(self):
        self.assertEqual(Path(self.project.directory_path), Path("/src/App"))

    def test_add_reference_deduplicates(self):
        self.project.add_package_reference(PackageReference("Serilog", "3.1.1", "/src/App/App.csproj"))
        self.project.add_package_reference(PackageReference("serilog", "3.1.1", "/src/app/app.csproj"))
        self.assertEqual(len(self.project.package_references), 1)

    def test_global_usings(self):
        self.project.add_global_using(GlobalUsing("Xunit", "/src/App/App.csproj"))
        self.project.add_global_using(GlobalUsing("XUNIT", "/src/App/App.csproj"))
        self.assertEqual(len(self.project.global_usings), 1)
        self.assertTrue(self.project.has_global_using_for("xunit"))
        self.assertFalse(self.project.has_global_using_for("Moq"))

    def test_exclude_pattern_rejects_blank(self):
        with self.assertRaises(ValueError):
            self.project.add_exclude_pattern(" ")

    def test_should_exclude_file(self):
        self.project.add_exclude_pattern("**/bin/**")
        self.assertTrue(self.project.should_exclude_file(""))
        self.assertTrue(self.project.should_exclude_file(None))
        self.assertTrue(self.project.should_exclude_file("/src/App/bin/Debug/A.cs"))
        self.assertTrue(self.project.should_exclude_file("/src/App/Form1.Designer.cs"))
        self.assertTrue(self.project.should_exclude_file("/src/App/Api.g.cs"))
        self.assertTrue(self.project.should_exclude_file("/src/App/View.g.i.cs"))
        self.assertFalse(self.project.should_exclude_file("/src/App/Cabinet.cs"))

    def test_exclude_ignores_parent_directories(self):
        """프로젝트 상위 경로의 bin/obj 이름은 제외 대상이 아님"""
        project = Project(file_path="/home/bin/repo/App/App.csproj", name="App", target_framework="net8.0")
        project.add_exclude_pattern("**/bin/**")
        project.add_exclude_pattern("**/obj/**")

        self.assertFalse(project.should_exclude_file("/home/bin/repo/App/Program.cs"))
        self.assertFalse(project.should_exclude_file("/home/bin/repo/App/Services/Api.cs"))
        self.assertTrue(project.should_exclude_file("/home/bin/repo/App/obj/x.cs"))
        self.assertTrue(project.should_exclude_file("/home/bin/repo/App/bin/Debug/A.cs"))
        self.assertEqual(project.relative_path("/home/bin/repo/App/Services/Api.cs"), "Services/Api.cs")

    def test_targets_framework(self):
        project = Project(file_path="/src/App/App.csproj", name="App", target_framework="net8.0",
                          target_frameworks=["net8.0", "net6.0"])
        self.assertTrue(project.targets_framework("net6.0"))
        self.assertTrue(project.targets_framework("NET8.0"))
        self.assertFalse(project.targets_framework("net7.0"))
        self.assertFalse(project.targets_framework(""))
        self.assertEqual(self.project.target_frameworks, ["net8.0"])

    def test_matches_exclude_pattern(self):
        self.assertTrue(matches_exclude_pattern("C:\\src\\Generated\\A.cs", "**/Generated/**"))
        self.assertTrue(matches_exclude_pattern("/src/App/Migrations/Init.cs", "src/**/Migrations"))
        self.assertFalse(matches_exclude_pattern("/lib/App/Migrations/Init.cs", "src/**/Migrations"))
        self.assertTrue(matches_exclude_pattern("/src/App/Foo.Tests.cs", "*.Tests.cs"))


class TestSolution(unittest.TestCase):
    """솔루션 엔티티 테스트"""

    def setUp(self):
        self.solution = Solution(file_path="/src/All.sln", name="All")
        self.app = Project("/src/App/App.csproj", "App", "net8.0")
        self.lib = Project("/src/Lib/Lib.csproj", "Lib", "net8.0")
        self.solution.add_project(self.app)
        self.solution.add_project(self.lib)
        self.solution.add_project(Project("/SRC/APP/App.csproj", "App", "net8.0"))

        used = PackageReference("Serilog", "3.1.1", self.app.file_path)
        used.mark_as_used("/src/App/A.cs")
        self.app.add_package_reference(used)
        self.app.add_package_reference(PackageReference("Newtonsoft.Json", "13.0.3", self.app.file_path))
        self.lib.add_package_reference(PackageReference("serilog", "3.1.1", self.lib.file_path))

    def test_projects_deduplicated(self):
        self.assertEqual(len(self.solution.projects), 2)

    def test_statistics(self):
        self.assertEqual(self.solution.get_package_statistics(), (3, 1, 2))
        self.assertEqual(len(self.solution.get_all_unused_packages()), 2)

    def test_grouped_by_id(self):
        grouped = self.solution.get_package_references_grouped_by_id()
        self.assertEqual(len(grouped["SERILOG"]), 2)
        self.assertEqual(len(grouped), 2)

    def test_find_project(self):
        self.assertIs(self.solution.find_project_by_name("lib"), self.lib)
        self.assertIs(self.solution.find_project_by_path("/SRC/LIB/LIB.CSPROJ"), self.lib)
        self.assertIsNone(self.solution.find_project_by_name(" "))
        self.assertIsNone(self.solution.find_project_by_path(None))

    def test_central_package_management(self):
        with self.assertRaises(ValueError):
            self.solution.enable_central_package_management("")
        self.solution.enable_central_package_management("/src/Directory.Packages.props")
        self.assertTrue(self.solution.central_package_management_enabled)
        self.solution.disable_central_package_management()
        self.assertFalse(self.solution.central_package_management_enabled)
        self.assertIsNone(self.solution.directory_packages_props_path)


class TestResult(unittest.TestCase):
    """Result / Error 테스트"""

    def test_success(self):
        result = Result.success(2)
        self.assertTrue(result.is_success)
        self.assertEqual(result.map(lambda v: v * 2).value, 4)
        self.assertEqual(result.bind(lambda v: Result.success(v + 1)).value, 3)
        with self.assertRaises(RuntimeError):
            result.error

    def test_failure(self):
        result = Result.failure(Error.not_found("Project"))
        self.assertTrue(result.is_failure)
        self.assertEqual(result.error.code, ErrorCode.NOT_FOUND)
        self.assertEqual(result.error.message, "Project was not found")
        self.assertEqual(result.value_or(5), 5)
        self.assertTrue(result.map(lambda v: v * 2).is_failure)
        with self.assertRaises(RuntimeError):
            result.value

    def test_error_equality(self):
        self.assertEqual(Error("parsing_error", "x"), Error.parsing("x"))
        self.assertNotEqual(Error.parsing("x"), Error.parsing("X"))

    def test_case_insensitive_dict(self):
        d = CaseInsensitiveDict()
        d["Newtonsoft.Json"] = "12.0.0"
        d["NEWTONSOFT.JSON"] = "13.0.3"
        self.assertEqual(len(d), 1)
        self.assertEqual(d["newtonsoft.json"], "13.0.3")
        self.assertIn("Newtonsoft.JSON", d)

    def test_detail_display(self):
        detail = PackageUsageDetail(
            package_id="Xunit", version="2.4.2", is_direct=True, is_used=False,
            condition="'$(Ci)'=='true'", has_global_using=True,
        )
        self.assertEqual(
            detail.display(),
            "Xunit 2.4.2 (Direct, Unused) (Condition: '$(Ci)'=='true') [Global Using]",
        )


class TestCancellationToken(unittest.TestCase):
    """취소 토큰 테스트"""

    def test_parent_cancel(self):
        parent = CancellationToken()
        child = CancellationToken(30, parent=parent)
        child.check()

        parent.cancel()
        self.assertTrue(child.is_cancelled)
        with self.assertRaises(OperationCancelled) as ctx:
            child.check()
        self.assertFalse(ctx.exception.timed_out)

    def test_deadline_with_parent(self):
        """호출자 토큰이 있어도 자체 시간 제한은 유지"""
        child = CancellationToken(0.01, parent=CancellationToken())
        time.sleep(0.05)

        self.assertTrue(child.timed_out)
        with self.assertRaises(OperationCancelled) as ctx:
            child.check()
        self.assertTrue(ctx.exception.timed_out)
        self.assertEqual(str(ctx.exception), "Analysis timed out")


# =============================================================================
# 로더
# =============================================================================

class TestSolutionLoader(TempDirTestCase):
    """솔루션 / 프로젝트 로더 테스트"""

    def test_load_sln(self):
        write(self.root / "App" / "App.csproj", csproj())
        write(self.root / "All.sln", r"""
        Microsoft Visual Studio Solution File, Format Version 12.00
        Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "App", "App\App.csproj", "{11111111-1111-1111-1111-111111111111}"
        EndProject
        Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "src", "src", "{22222222-2222-2222-2222-222222222222}"
        EndProject
        Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Gone", "Gone\Gone.csproj", "{33333333-3333-3333-3333-333333333333}"
        EndProject
        """)

        solution = SolutionLoader().load_solution(self.root / "All.sln")

        self.assertEqual(solution.name, "All")
        self.assertFalse(solution.is_virtual)
        self.assertEqual([p.name for p in solution.projects], ["App"])
        self.assertEqual(solution.projects[0].target_framework, "net8.0")
        self.assertIn("**/bin/**", solution.projects[0].exclude_patterns)

    def test_load_slnx(self):
        write(self.root / "App" / "App.csproj", csproj())
        write(self.root / "Lib" / "Lib.csproj", csproj())
        write(self.root / "All.slnx", """
        <Solution xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
          <Project Path="App/App.csproj" />
          <Folder Name="/libs/">
            <Project><Path>Lib\\Lib.csproj</Path></Project>
          </Folder>
          <Project Path="" />
          <Project Path="Missing/Missing.csproj" />
        </Solution>
        """)

        solution = SolutionLoader().load_solution(self.root / "All.slnx")
        self.assertEqual(sorted(p.name for p in solution.projects), ["App", "Lib"])

    def test_malformed_slnx(self):
        write(self.root / "Bad.slnx", "<Solution><Project Path='x'></Solution>")
        with self.assertRaises(SolutionParseError):
            SolutionLoader().load_solution(self.root / "Bad.slnx")

    def test_missing_solution(self):
        with self.assertRaises(FileNotFoundError):
            SolutionLoader().load_solution(self.root / "None.sln")

    def test_target_framework(self):
        multi = write(self.root / "Multi" / "Multi.csproj",
                      csproj(framework="<TargetFrameworks>net8.0;net6.0</TargetFrameworks>"))
        none = write(self.root / "None" / "None.csproj", csproj(framework=""))

        loader = SolutionLoader()
        self.assertEqual(loader.load_project(multi).target_framework, "net8.0")
        self.assertEqual(loader.load_project(multi).target_frameworks, ["net8.0", "net6.0"])
        self.assertEqual(loader.load_project(none).target_framework, "net9.0")
        self.assertEqual(loader.load_project(none).target_frameworks, ["net9.0"])

    def test_malformed_project(self):
        path = write(self.root / "Bad" / "Bad.csproj", "<Project><ItemGroup></Project>")
        with self.assertRaises(ProjectParseError):
            SolutionLoader().load_project(path)

    def test_discovery(self):
        write(self.root / "A.sln", "")
        write(self.root / "nested" / "B.sln", "")
        write(self.root / "src" / "App" / "App.csproj", csproj())
        write(self.root / "src" / "Lib" / "Lib.vbproj", csproj())
        write(self.root / "src" / "App" / "bin" / "Copy.csproj", csproj())
        write(self.root / "node_modules" / "x" / "X.fsproj", csproj())

        self.assertEqual([p.name for p in discover_solution_files(self.root)], ["A.sln"])
        self.assertEqual(
            sorted(p.name for p in discover_project_files(self.root)),
            ["App.csproj", "Lib.vbproj"],
        )

    def test_virtual_solutions(self):
        project_path = write(self.root / "App" / "App.csproj", csproj())
        write(self.root / "Lib" / "Lib.csproj", csproj())
        loader = SolutionLoader()

        single = loader.load_virtual_solution_from_project(project_path)
        self.assertTrue(single.is_virtual)
        self.assertEqual(single.name, "App_Solution")
        self.assertTrue(single.file_path.endswith("App.sln"))

        directory = loader.load_virtual_solution_from_directory(self.root)
        self.assertEqual(directory.name, f"{self.root.name}_Solution")
        self.assertEqual(len(directory.projects), 2)

    def test_collect_source_files(self):
        project_path = write(self.root / "App" / "App.csproj", csproj())
        write(self.root / "App" / "Program.cs", "class P {}")
        write(self.root / "App" / "Form1.Designer.cs", "class F {}")
        write(self.root / "App" / "obj" / "AssemblyInfo.cs", "class A {}")
        write(self.root / "App" / "Module.vb", "Module M\nEnd Module")
        write(self.root / "App" / "README.md", "docs")

        loader = SolutionLoader()
        project = loader.load_project(project_path)
        files = loader.collect_source_files(project)
        self.assertEqual(sorted(Path(f).name for f in files), ["Module.vb", "Program.cs"])


# =============================================================================
# Central Package Management
# =============================================================================

class TestCentralPackageManagement(TempDirTestCase):
    """CPM 해석 테스트"""

    def test_find_props_walks_up(self):
        expected = write(self.root / "Directory.Packages.props", props())
        start = self.root / "src" / "App"
        start.mkdir(parents=True)
        self.assertEqual(Path(cpm.find_props_file(start)), expected)

    def test_disabled(self):
        write(self.root / "Directory.Packages.props", props(enabled="false"))
        self.assertEqual(cpm.check(self.root), (False, None))
        resolution = cpm.resolve(self.root)
        self.assertFalse(resolution.enabled)
        self.assertEqual(len(resolution.versions), 0)

    def test_enabled_by_import(self):
        write(self.root / "shared.props", props(enabled="TRUE"))
        path = write(self.root / "Directory.Packages.props",
                     props(enabled="false", imports='<Import Project="shared.props" />'))
        self.assertTrue(cpm.is_enabled(path))

    def test_imports_then_local_last_write_wins(self):
        write(self.root / "build" / "base.props", props(items="""
            <PackageVersion Include="Newtonsoft.Json" Version="12.0.1" />
            <PackageVersion Include="Serilog" Version="3.0.0" />
        """))
        path = write(self.root / "Directory.Packages.props", props(
            imports='<Import Project="build\\base.props" />',
            items="""
            <PackageVersion Include="newtonsoft.json" Version="13.0.3" />
            <PackageVersion Update="Moq" Version="4.18.0" />
            <PackageVersion Include="Moq" Version="4.20.70" />
            <PackageVersion Include="NoVersion" />
            <PackageVersion Include="Blank" Version=" " />
            """,
        ))

        versions = cpm.load_versions(path)

        self.assertEqual(versions["NEWTONSOFT.JSON"], "13.0.3")
        self.assertEqual(versions["serilog"], "3.0.0")
        self.assertEqual(versions["Moq"], "4.20.70")
        self.assertNotIn("NoVersion", versions)
        self.assertNotIn("Blank", versions)

    def test_import_cycle_terminates(self):
        write(self.root / "b.props", props(
            imports='<Import Project="Directory.Packages.props" />',
            items='<PackageVersion Include="B" Version="1.0.0" />',
        ))
        path = write(self.root / "Directory.Packages.props", props(
            imports='<Import Project="b.props" />',
            items='<PackageVersion Include="A" Version="1.0.0" />',
        ))

        versions = cpm.load_versions(path)
        self.assertEqual(versions["A"], "1.0.0")
        self.assertEqual(versions["B"], "1.0.0")
        self.assertTrue(cpm.is_enabled(path))

    def test_missing_import_skipped(self):
        path = write(self.root / "Directory.Packages.props", props(
            imports='<Import Project="missing.props" />',
            items='<PackageVersion Include="A" Version="1.0.0" />',
        ))
        self.assertEqual(dict(cpm.load_versions(path).items()), {"A": "1.0.0"})

    def test_this_file_directory_import(self):
        write(self.root / "build" / "versions.props", props(
            items='<PackageVersion Include="A" Version="2.0.0" />',
        ))
        path = write(self.root / "Directory.Packages.props", props(
            imports='<Import Project="$(MSBuildThisFileDirectory)build/versions.props" />',
        ))
        self.assertEqual(cpm.load_versions(path)["A"], "2.0.0")

    def test_missing_start_file(self):
        with self.assertRaises(FileNotFoundError):
            cpm.load_versions(self.root / "Directory.Packages.props")

    def test_malformed_import(self):
        write(self.root / "bad.props", "<Project><ItemGroup></Project>")
        path = write(self.root / "Directory.Packages.props",
                     props(imports='<Import Project="bad.props" />'))
        with self.assertRaises(cpm.CpmParseError) as ctx:
            cpm.load_versions(path)
        self.assertTrue(ctx.exception.path.endswith("bad.props"))

    def test_solution_root_from_projects(self):
        far = write(self.root / "aa" / "x" / "Directory.Packages.props", props())
        near = write(self.root / "bb" / "Directory.Packages.props", props())
        (self.root / "aa" / "x" / "P1").mkdir(parents=True)
        (self.root / "bb" / "P2").mkdir(parents=True)

        solution = Solution(file_path=str(self.root / "All.sln"), name="All")
        solution.add_project(Project(str(self.root / "aa" / "x" / "P1" / "P1.csproj"), "P1", "net8.0"))
        solution.add_project(Project(str(self.root / "bb" / "P2" / "P2.csproj"), "P2", "net8.0"))

        enabled, chosen = cpm.select_solution_root(solution)
        self.assertTrue(enabled)
        self.assertEqual(Path(chosen), near)
        self.assertNotEqual(Path(chosen), far)

        self.assertIsNotNone(cpm.apply_to_solution(solution))
        self.assertTrue(solution.central_package_management_enabled)

    def test_cache_loads_once(self):
        cache = cpm.CpmCache()
        loaded = CaseInsensitiveDict({"A": "1.0.0"})
        with mock.patch.object(cpm, "load_versions", return_value=loaded) as load:
            cache.get("/repo/Directory.Packages.props")
            cache.get("/repo/Directory.Packages.props")
        self.assertEqual(load.call_count, 1)
        self.assertEqual(len(cache), 1)


# =============================================================================
# 패키지 참조 추출
# =============================================================================

class TestExtractor(TempDirTestCase):
    """패키지 참조 추출 테스트"""

    def test_versions_and_global_usings(self):
        path = write(self.root / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Serilog" Version="3.1.1" />
            <PackageReference Include="Newtonsoft.Json" />
            <PackageReference Include="Moq" Version="4.20.70" />
            <PackageReference Include="Xunit">
              <Version>2.4.2</Version>
            </PackageReference>
            <PackageReference Include="Missing" Condition="'$(Ci)'=='true'" />
            <PackageReference Include="" Version="1.0.0" />
            <Using Include="Xunit" />
            <Using Include="System.Text" Condition="'$(X)'=='1'" />
        """))

        extractor = PackageReferenceExtractor({"newtonsoft.json": "13.0.3", "moq": "4.0.0"})
        with self.assertLogs("depsolve_nuget.extractor", level="WARNING") as logs:
            result = extractor.extract(path)

        refs = {r.package_id: r for r in result.references}
        self.assertEqual(sorted(refs), ["Moq", "Newtonsoft.Json", "Serilog", "Xunit"])
        self.assertEqual(refs["Newtonsoft.Json"].version, "13.0.3")
        self.assertEqual(refs["Moq"].version, "4.20.70")
        self.assertEqual(refs["Xunit"].version, "2.4.2")
        self.assertTrue(refs["Xunit"].has_global_using)
        self.assertFalse(refs["Serilog"].has_global_using)

        self.assertEqual(result.skipped, ["Missing"])
        self.assertIn("Missing", "".join(logs.output))

        self.assertEqual([g.package_id for g in result.global_usings], ["Xunit", "System.Text"])
        self.assertEqual(result.global_usings[1].condition, "'$(X)'=='1'")

    def test_condition_preserved(self):
        path = write(self.root / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Serilog" Version="3.1.1" Condition="'$(Configuration)' == 'Debug'" />
        """))
        ref = PackageReferenceExtractor().extract(path).references[0]
        self.assertEqual(ref.condition, "'$(Configuration)' == 'Debug'")

    def test_apply_to_project(self):
        path = write(self.root / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Serilog" Version="3.1.1" />
            <Using Include="Serilog" />
        """))
        project = SolutionLoader().load_project(path)
        PackageReferenceExtractor().extract(path).apply_to(project)
        self.assertEqual(len(project.package_references), 1)
        self.assertTrue(project.has_global_using_for("serilog"))

    def test_errors(self):
        with self.assertRaises(FileNotFoundError):
            PackageReferenceExtractor().extract(self.root / "None.csproj")

        bad = write(self.root / "Bad.csproj", "<Project>")
        with self.assertRaises(ProjectParseError):
            PackageReferenceExtractor().extract(bad)

    def test_development_dependency(self):
        self.assertTrue(is_development_dependency("xunit.runner.visualstudio"))
        self.assertTrue(is_development_dependency("coverlet.collector"))
        self.assertTrue(is_development_dependency("Microsoft.CodeAnalysis.NetAnalyzers"))
        self.assertFalse(is_development_dependency("Newtonsoft.Json"))
        self.assertFalse(is_development_dependency(""))
        self.assertTrue(is_development_dependency("Acme.Analyzers", ["analyzers"]))


# =============================================================================
# 네임스페이스 / 사용 분석
# =============================================================================

class TestNamespaceResolver(unittest.TestCase):
    """후보 네임스페이스 테스트"""

    def test_prefixes_and_aliases(self):
        namespaces = NamespaceResolver().namespaces_for("Microsoft.Extensions.Logging")
        self.assertEqual(namespaces, [
            "Microsoft.Extensions.Logging",
            "Microsoft",
            "Microsoft.Extensions",
            "Microsoft.Extensions.DependencyInjection",
        ])

    def test_alias_lookup_case_insensitive(self):
        namespaces = NamespaceResolver().namespaces_for("NEWTONSOFT.JSON")
        self.assertIn("Newtonsoft.Json.Linq", namespaces)
        self.assertEqual(len([n for n in namespaces if n.lower() == "newtonsoft.json"]), 1)

    def test_injected_aliases(self):
        resolver = NamespaceResolver({"Serilog.AspNetCore": ["Serilog"]})
        self.assertNotIn("Newtonsoft.Json.Linq", resolver.namespaces_for("Newtonsoft.Json"))

        resolver.add_alias("serilog.aspnetcore", "Serilog.Extensions.Hosting")
        self.assertEqual(
            resolver.namespaces_for("Serilog.AspNetCore"),
            ["Serilog.AspNetCore", "Serilog", "Serilog.Extensions.Hosting"],
        )

    def test_blank(self):
        self.assertEqual(NamespaceResolver().namespaces_for(" "), [])


class TestExtractNamespaces(unittest.TestCase):
    """소스 네임스페이스 추출 테스트"""

    def test_csharp_forms(self):
        content = textwrap.dedent("""
            using System;
            global using Xunit;
            using static Foo.Bar;
            using J = Newtonsoft.Json;

            var logger = Serilog.Log.Logger;
            using (var stream = new MemoryStream()) { }
        """)
        found = extract_namespaces(content, "Program.cs")
        for expected in ("System", "Xunit", "Foo.Bar", "Newtonsoft.Json", "Serilog.Log"):
            self.assertIn(expected, found)
        self.assertNotIn("var", found)

    def test_vb_and_fsharp(self):
        self.assertIn("Newtonsoft.Json", extract_namespaces("Imports Newtonsoft.Json\n", "Module.vb"))
        self.assertIn("Serilog", extract_namespaces("open Serilog\n", "Program.fs"))


class TestUsageAnalyzer(TempDirTestCase):
    """사용 분석 테스트"""

    def make_project(self, name="App", refs=(), sources=None, global_using=()):
        project_path = write(self.root / name / f"{name}.csproj", csproj())
        for rel, content in (sources or {}).items():
            write(self.root / name / rel, content)

        project = SolutionLoader().load_project(project_path)
        for package_id, version in refs:
            project.add_package_reference(PackageReference(
                package_id=package_id, version=version, project_path=project.file_path,
                has_global_using=package_id in global_using,
            ))
        return project

    def refs(self, project):
        return {r.package_id: r for r in project.package_references}

    def test_marks_used_and_unused(self):
        project = self.make_project(
            refs=[("Newtonsoft.Json", "13.0.3"), ("Serilog", "3.1.1")],
            sources={"Program.cs": "using Newtonsoft.Json;\nclass P { }\n"},
        )

        PackageUsageAnalyzer().analyze_project(project)

        refs = self.refs(project)
        self.assertTrue(refs["Newtonsoft.Json"].is_used)
        self.assertEqual([Path(p).name for p in refs["Newtonsoft.Json"].usage_locations], ["Program.cs"])
        self.assertIn("Newtonsoft.Json", refs["Newtonsoft.Json"].detected_namespaces)
        self.assertFalse(refs["Serilog"].is_used)

    def test_qualified_identifier(self):
        project = self.make_project(
            refs=[("Serilog", "3.1.1")],
            sources={"Program.cs": "class P { object M() => new Serilog.LoggerConfiguration(); }"},
        )
        PackageUsageAnalyzer().analyze_project(project)
        self.assertTrue(self.refs(project)["Serilog"].is_used)

    def test_global_using_policy(self):
        project = self.make_project(refs=[("Xunit", "2.4.2")], global_using=("Xunit",))
        PackageUsageAnalyzer().analyze_project(project)
        xunit = self.refs(project)["Xunit"]
        self.assertTrue(xunit.is_used)
        self.assertEqual(xunit.usage_locations, [project.file_path])
        self.assertEqual(xunit.detected_namespaces, ["Xunit"])

        PackageUsageAnalyzer(treat_global_using_as_used=False).analyze_project(project)
        self.assertFalse(xunit.is_used)

    def test_dev_dependency_policy(self):
        project = self.make_project(refs=[("coverlet.collector", "6.0.0")])

        PackageUsageAnalyzer().analyze_project(project)
        self.assertFalse(self.refs(project)["coverlet.collector"].is_used)

        PackageUsageAnalyzer(exclude_dev_dependencies_from_unused=True).analyze_project(project)
        coverlet = self.refs(project)["coverlet.collector"]
        self.assertTrue(coverlet.is_used)
        self.assertEqual(coverlet.usage_locations, [])

    def test_reanalysis_resets(self):
        project = self.make_project(
            refs=[("Serilog", "3.1.1")],
            sources={"Program.cs": "using Serilog;\n"},
        )
        analyzer = PackageUsageAnalyzer()
        analyzer.analyze_project(project)
        self.assertTrue(self.refs(project)["Serilog"].is_used)

        write(self.root / "App" / "Program.cs", "class P { }\n")
        analyzer.analyze_project(project)
        self.assertFalse(self.refs(project)["Serilog"].is_used)

    def test_excluded_files_not_scanned(self):
        project = self.make_project(
            refs=[("Serilog", "3.1.1"), ("Moq", "4.20.70")],
            sources={
                "Generated/Client.g.cs": "using Serilog;\n",
                "Legacy/Old.cs": "using Moq;\n",
            },
        )
        project.add_exclude_pattern("**/Legacy/**")
        PackageUsageAnalyzer().analyze_project(project)
        self.assertFalse(self.refs(project)["Serilog"].is_used)
        self.assertFalse(self.refs(project)["Moq"].is_used)

    def test_unreadable_file_is_skipped(self):
        project = self.make_project(refs=[("Serilog", "3.1.1")])
        project.add_source_file(str(self.root / "App" / "Missing.cs"))

        with self.assertLogs("depsolve_nuget.usage", level="WARNING"):
            accumulator = PackageUsageAnalyzer().analyze_project(project)
        self.assertEqual(len(accumulator.warnings), 1)
        self.assertFalse(self.refs(project)["Serilog"].is_used)

    def test_scan_does_not_mutate(self):
        project = self.make_project(
            refs=[("Serilog", "3.1.1")],
            sources={"Program.cs": "using Serilog;\n"},
        )
        analyzer = PackageUsageAnalyzer()
        analyzer.loader.collect_source_files(project)
        accumulator = analyzer.scan_project(project)

        self.assertEqual(len(accumulator.events), 1)
        self.assertFalse(self.refs(project)["Serilog"].is_used)
        accumulator.apply(project.package_references)
        self.assertTrue(self.refs(project)["Serilog"].is_used)

    def test_cancellation_keeps_state(self):
        project = self.make_project(
            refs=[("Serilog", "3.1.1")],
            sources={"Program.cs": "class P { }\n"},
        )
        self.refs(project)["Serilog"].mark_as_used("/previous.cs")

        token = CancellationToken()
        token.cancel()
        with self.assertRaises(OperationCancelled):
            PackageUsageAnalyzer(cancellation=token).analyze_project(project)
        self.assertTrue(self.refs(project)["Serilog"].is_used)

    def test_parallel_projects(self):
        solution = Solution(file_path=str(self.root / "All.sln"), name="All")
        for name in ("A", "B", "C"):
            solution.add_project(self.make_project(
                name=name,
                refs=[("Newtonsoft.Json", "13.0.3"), ("Serilog", "3.1.1")],
                sources={"Program.cs": "using Newtonsoft.Json;\n"},
            ))

        PackageUsageAnalyzer(max_workers=3).analyze_solution(solution)
        self.assertEqual(solution.get_package_statistics(), (6, 3, 3))

    def test_project_under_bin_directory(self):
        """bin/ 아래 체크아웃된 프로젝트도 소스를 스캔"""
        app_dir = self.root / "bin" / "repo" / "App"
        write(app_dir / "Program.cs", "using Newtonsoft.Json;\n")
        write(app_dir / "obj" / "Gen.cs", "using Newtonsoft.Json;\n")
        project = SolutionLoader().load_project(write(app_dir / "App.csproj", csproj()))
        project.add_package_reference(PackageReference(
            package_id="Newtonsoft.Json", version="13.0.3", project_path=project.file_path,
        ))
        for pattern in ("**/bin/**", "**/obj/**"):
            project.add_exclude_pattern(pattern)

        PackageUsageAnalyzer().analyze_project(project)

        reference = self.refs(project)["Newtonsoft.Json"]
        self.assertTrue(reference.is_used)
        self.assertEqual([Path(p).name for p in reference.usage_locations], ["Program.cs"])

    def test_validate_inputs(self):
        solution = Solution(file_path=str(self.root / "Virtual.sln"), name="V", is_virtual=True)
        solution.add_project(Project(str(self.root / "Gone" / "Gone.csproj"), "Gone", "net8.0"))

        errors = PackageUsageAnalyzer().validate_inputs(solution)
        self.assertEqual(len(errors), 2)
        self.assertIn("Project file does not exist", errors[0])
        self.assertEqual(PackageUsageAnalyzer().validate_inputs(None), ["Solution cannot be null"])


# =============================================================================
# 설정
# =============================================================================

class TestConfig(TempDirTestCase):
    """YAML 설정 테스트"""

    def test_missing_file_defaults(self):
        config = AnalysisConfig.load(self.root)
        self.assertTrue(config.treat_global_using_as_used)
        self.assertFalse(config.exclude_dev_dependencies_from_unused)
        self.assertEqual(config.timeout_seconds, 300)
        self.assertIsNone(config.source_path)

    def test_save_and_load(self):
        config = AnalysisConfig(
            exclude_patterns=["**/Migrations/**"],
            namespace_aliases={"Serilog.AspNetCore": ["Serilog"]},
            exclude_dev_dependencies_from_unused=True,
            timeout_seconds=60,
        )
        config.save(self.root)

        loaded = AnalysisConfig.load(self.root)
        self.assertEqual(loaded.exclude_patterns, ["**/Migrations/**"])
        self.assertEqual(loaded.namespace_aliases, {"Serilog.AspNetCore": ["Serilog"]})
        self.assertTrue(loaded.exclude_dev_dependencies_from_unused)
        self.assertEqual(loaded.timeout_seconds, 60)

    def test_malformed_yaml(self):
        write(config_path_for(self.root), "exclude_patterns: [unclosed\n")
        with self.assertLogs("depsolve_nuget.config", level="WARNING"):
            config = AnalysisConfig.load(self.root)
        self.assertEqual(config.exclude_patterns, [])

    def test_policy_flags_require_booleans(self):
        write(config_path_for(self.root), """
            treat_global_using_as_used: "false"
            exclude_dev_dependencies_from_unused: yes
        """)
        with self.assertLogs("depsolve_nuget.config", level="WARNING") as logs:
            config = AnalysisConfig.load(self.root)
        self.assertTrue(config.treat_global_using_as_used)
        self.assertTrue(config.exclude_dev_dependencies_from_unused)
        self.assertIn("treat_global_using_as_used", "\n".join(logs.output))

        write(config_path_for(self.root), "treat_global_using_as_used: false\n")
        self.assertFalse(AnalysisConfig.load(self.root).treat_global_using_as_used)

    def test_non_positive_timeout_ignored(self):
        for value in ("0", "-5", "ten"):
            write(config_path_for(self.root), f"timeout_seconds: {value}\n")
            with self.assertLogs("depsolve_nuget.config", level="WARNING"):
                config = AnalysisConfig.load(self.root)
            self.assertEqual(config.timeout_seconds, 300)

    def test_initial_config(self):
        path = create_initial_config(self.root)
        self.assertTrue(path.is_file())
        with self.assertRaises(FileExistsError):
            create_initial_config(self.root)
        create_initial_config(self.root, overwrite=True)


# =============================================================================
# 통합
# =============================================================================

class TestAnalysis(TempDirTestCase):
    """전체 분석 테스트"""

    def make_cpm_solution(self):
        write(self.root / "Directory.Packages.props", props(items="""
            <PackageVersion Include="Newtonsoft.Json" Version="13.0.3" />
            <PackageVersion Include="Serilog" Version="3.1.1" />
        """))
        write(self.root / "App.sln", r"""
        Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "App", "src\App\App.csproj", "{11111111-1111-1111-1111-111111111111}"
        EndProject
        """)
        write(self.root / "src" / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Newtonsoft.Json" />
            <PackageReference Include="Serilog" />
        """))
        write(self.root / "src" / "App" / "Program.cs", """
            using Newtonsoft.Json;

            class Program
            {
                static void Main() => JsonConvert.SerializeObject(1);
            }
        """)

    def test_solution_with_cpm(self):
        self.make_cpm_solution()

        result = analyze(str(self.root))

        self.assertTrue(result.is_success, result)
        report = result.value
        self.assertEqual(report.solution_name, "App")
        self.assertTrue(report.central_package_management)
        self.assertEqual(report.total_packages, 2)
        self.assertEqual([d.package_id for d in report.get_all_unused()], ["Serilog"])
        self.assertEqual(report.get_all_used()[0].version, "13.0.3")
        self.assertEqual(
            report.summary(),
            "Analyzed 1 project(s) with 2 package(s). "
            "Found 1 unused package(s) (50.0%) and 1 used package(s).",
        )

    def test_global_using_only(self):
        path = write(self.root / "Tests" / "Tests.csproj", csproj(items="""
            <PackageReference Include="Xunit" Version="2.4.2" />
            <Using Include="Xunit" />
        """))

        result = analyze(str(path))

        self.assertTrue(result.is_success, result)
        detail = result.value.get_all_used()[0]
        self.assertEqual(detail.package_id, "Xunit")
        self.assertTrue(detail.has_global_using)
        self.assertEqual(result.value.solution_name, "Tests_Solution")

    def test_directory_without_solution(self):
        write(self.root / "A" / "A.csproj", csproj(items='<PackageReference Include="Serilog" Version="3.1.1" />'))
        write(self.root / "B" / "B.csproj", csproj(items='<PackageReference Include="Moq" Version="4.20.70" />'))
        write(self.root / "B" / "Tests.cs", "using Moq;\n")

        result = analyze(str(self.root))

        self.assertTrue(result.is_success, result)
        self.assertEqual(result.value.total_projects, 2)
        self.assertEqual(result.value.unused_packages, 1)

    def test_command_exclude_patterns(self):
        self.make_cpm_solution()
        result = analyze(str(self.root), exclude_patterns=["Program.cs"])
        self.assertTrue(result.is_success, result)
        self.assertEqual(result.value.unused_packages, 2)

    def test_config_policy(self):
        write(self.root / "App" / "App.csproj", csproj(
            items='<PackageReference Include="coverlet.collector" Version="6.0.0" />'))
        AnalysisConfig(exclude_dev_dependencies_from_unused=True).save(self.root / "App")

        result = analyze(str(self.root / "App" / "App.csproj"))
        self.assertTrue(result.is_success, result)
        self.assertEqual(result.value.unused_packages, 0)

        plain = analyze(str(self.root / "App" / "App.csproj"), use_config=False)
        self.assertEqual(plain.value.unused_packages, 1)
        self.assertTrue(plain.value.get_all_unused()[0].is_development_dependency)

    def test_missing_version_warning(self):
        write(self.root / "App" / "App.csproj", csproj(items='<PackageReference Include="Serilog" />'))
        result = analyze(str(self.root / "App" / "App.csproj"))
        self.assertTrue(result.is_success, result)
        self.assertEqual(result.value.total_packages, 0)
        self.assertEqual(len(result.value.warnings), 1)

    def test_error_codes(self):
        self.assertEqual(analyze(" ").error.code, ErrorCode.INVALID_PATH)
        self.assertEqual(analyze(str(self.root / "nope")).error.code, ErrorCode.PATH_NOT_FOUND)
        self.assertEqual(analyze(str(self.root)).error.code, ErrorCode.NO_PROJECTS_FOUND)

        bad = write(self.root / "Bad" / "Bad.csproj", "<Project>")
        self.assertEqual(analyze(str(bad)).error.code, ErrorCode.PARSING)

        text = write(self.root / "notes.txt", "x")
        self.assertEqual(analyze(str(text)).error.code, ErrorCode.INVALID_PATH)

    def test_target_framework_filter(self):
        path = write(self.root / "App" / "App.csproj", csproj())
        result = analyze(str(path), target_framework="net6.0")
        self.assertEqual(result.error.code, ErrorCode.NO_PROJECTS_FOUND)
        self.assertTrue(analyze(str(path), target_framework="NET8.0").is_success)

    def test_target_framework_filter_multi_target(self):
        path = write(self.root / "Lib" / "Lib.csproj",
                     csproj(framework="<TargetFrameworks>net8.0;net6.0</TargetFrameworks>"))

        result = analyze(str(path), target_framework="net6.0")

        self.assertTrue(result.is_success, result)
        self.assertEqual(result.value.project_results[0].target_framework, "net8.0")
        self.assertEqual(analyze(str(path), target_framework="net7.0").error.code,
                         ErrorCode.NO_PROJECTS_FOUND)

    def test_repeated_runs_reread_central_versions(self):
        """같은 분석 객체로 다시 실행하면 바뀐 Directory.Packages.props를 읽음"""
        write(self.root / "Directory.Packages.props", props(items="""
            <PackageVersion Include="Serilog" Version="3.0.0" />
        """))
        path = write(self.root / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Serilog" />
        """))
        analysis = PackageUsageAnalysis()

        first = analysis.run(AnalyzeCommand(path=str(path)))
        self.assertTrue(first.is_success, first)
        self.assertEqual(first.value.get_all_unused()[0].version, "3.0.0")

        write(self.root / "Directory.Packages.props", props(items="""
            <PackageVersion Include="Serilog" Version="4.0.0" />
        """))
        second = analysis.run(AnalyzeCommand(path=str(path)))
        self.assertTrue(second.is_success, second)
        self.assertEqual(second.value.get_all_unused()[0].version, "4.0.0")

    def test_malformed_cpm(self):
        self.make_cpm_solution()
        write(self.root / "Directory.Packages.props",
              "<Project><PropertyGroup><ManagePackageVersionsCentrally>true</ManagePackageVersionsCentrally></Project>")
        self.assertEqual(analyze(str(self.root)).error.code, ErrorCode.PARSING)

    def test_cancellation(self):
        path = write(self.root / "App" / "App.csproj", csproj())
        token = CancellationToken()
        token.cancel()

        result = PackageUsageAnalysis().run(AnalyzeCommand(path=str(path)), cancellation=token)

        self.assertEqual(result.error.code, ErrorCode.CANCELLED)
        self.assertEqual(result.error.message, "Analysis was cancelled")

    def test_caller_token_keeps_timeout(self):
        """호출자 토큰은 부모로 연결되고 시간 제한은 그대로 적용"""
        path = write(self.root / "App" / "App.csproj", csproj())
        caller = CancellationToken()

        with mock.patch.object(analyzer_module, "CancellationToken", wraps=CancellationToken) as factory:
            result = PackageUsageAnalysis().run(
                AnalyzeCommand(path=str(path), timeout_seconds=30), cancellation=caller,
            )

        self.assertTrue(result.is_success, result)
        factory.assert_called_once_with(30, parent=caller)

    def test_config_timeout_applies(self):
        path = write(self.root / "App" / "App.csproj", csproj())
        write(config_path_for(self.root / "App"), "timeout_seconds: 45\n")

        with mock.patch.object(analyzer_module, "CancellationToken", wraps=CancellationToken) as factory:
            result = PackageUsageAnalysis().run(AnalyzeCommand(path=str(path)))

        self.assertTrue(result.is_success, result)
        factory.assert_called_once_with(45, parent=None)

    def test_invalid_timeout(self):
        path = write(self.root / "App" / "App.csproj", csproj())
        result = PackageUsageAnalysis().run(AnalyzeCommand(path=str(path), timeout_seconds=0))
        self.assertEqual(result.error.code, ErrorCode.VALIDATION)


# =============================================================================
# 리포터 / CLI
# =============================================================================

class TestReporters(TempDirTestCase):
    """리포터 테스트"""

    def setUp(self):
        super().setUp()
        write(self.root / "App" / "App.csproj", csproj(items="""
            <PackageReference Include="Serilog" Version="3.1.1" />
            <PackageReference Include="Moq" Version="4.20.70" />
        """))
        write(self.root / "App" / "Program.cs", "using Serilog;\n")
        self.report = analyze(str(self.root), use_config=False).value

    def test_json(self):
        out = io.StringIO()
        JsonReporter(output=out).report(self.report)
        data = json.loads(out.getvalue())
        self.assertEqual(data["summary"]["total_packages"], 2)
        self.assertEqual(data["summary"]["unused_percentage"], 50.0)
        self.assertEqual(data["projects"][0]["unused"][0]["package_id"], "Moq")

    def test_markdown(self):
        out = io.StringIO()
        MarkdownReporter(output=out).report(self.report)
        text = out.getvalue()
        self.assertIn("## Unused Packages", text)
        self.assertIn("| Moq | 4.20.70 |", text)

    def test_console(self):
        out = io.StringIO()
        ConsoleReporter(output=out, verbose=True).report(self.report)
        text = out.getvalue()
        self.assertNotIn("\033[", text)
        self.assertIn("Unused (1)", text)
        self.assertIn("Used (1)", text)
        self.assertIn(self.report.summary(), text)


class TestCli(TempDirTestCase):
    """CLI 테스트"""

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = cli_main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_analyze_json(self):
        write(self.root / "App" / "App.csproj", csproj(
            items='<PackageReference Include="Serilog" Version="3.1.1" />'))
        code, out, _ = self.run_cli("analyze", str(self.root), "--format", "json", "--no-config")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["summary"]["unused_packages"], 1)

    def test_analyze_output_file(self):
        write(self.root / "App" / "App.csproj", csproj())
        target = self.root / "report.md"
        code, _, _ = self.run_cli("analyze", str(self.root), "-f", "markdown", "-o", str(target))
        self.assertEqual(code, 0)
        self.assertIn("# depsolve-nuget", target.read_text(encoding='utf-8'))

    def test_exit_codes(self):
        self.assertEqual(self.run_cli("analyze", str(self.root / "missing"))[0], 3)
        self.assertEqual(self.run_cli("analyze", str(self.root / "missing.sln"))[0], 2)
        self.assertEqual(self.run_cli("analyze", str(self.root))[0], 5)
        self.assertEqual(self.run_cli("analyze", str(self.root), "--workers", "0")[0], 1)
        self.assertEqual(self.run_cli("bogus")[0], 1)

    def test_namespaces(self):
        code, out, _ = self.run_cli("namespaces", "Newtonsoft.Json", "--config-root", str(self.root))
        self.assertEqual(code, 0)
        self.assertIn("Newtonsoft.Json.Linq", out.splitlines())

    def test_cpm(self):
        write(self.root / "Directory.Packages.props",
              props(items='<PackageVersion Include="Serilog" Version="3.1.1" />'))
        code, out, _ = self.run_cli("cpm", str(self.root), "--json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["versions"], {"Serilog": "3.1.1"})

    def test_init(self):
        self.assertEqual(self.run_cli("init", str(self.root))[0], 0)
        self.assertTrue(config_path_for(self.root).is_file())
        self.assertEqual(self.run_cli("init", str(self.root))[0], 1)


def run_tests():
    """테스트 실행"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for case in (
        TestNamespacePattern, TestPackageReference, TestProject, TestSolution, TestResult,
        TestCancellationToken, TestSolutionLoader, TestCentralPackageManagement, TestExtractor,
        TestNamespaceResolver, TestExtractNamespaces, TestUsageAnalyzer,
        TestConfig, TestAnalysis, TestReporters, TestCli,
    ):
        suite.addTests(loader.loadTestsFromTestCase(case))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    exit(run_tests())
