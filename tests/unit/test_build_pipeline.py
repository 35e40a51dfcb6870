"""
构建管道单元测试

测试构建管道、构建上下文和构建器的核心功能。
"""

import zipfile
from pathlib import Path
from types import MappingProxyType

import pytest

from jarsmith.build.build_context import BuildContext
from jarsmith.build.build_pipeline import BuildPipeline, run_pipeline
from jarsmith.build.builder import Builder
from jarsmith.build.manifest import MANIFEST_NAME, read_manifest
from jarsmith.build.steps import (
    CleanStep,
    EndStep,
    JarStep,
    JavacStep,
    ResourcesStep,
    SyncPomStep,
    UberStep,
)
from jarsmith.build.steps.build_step import BuildStep
from jarsmith.config.schema import BuildConfig, DEFAULT_TASKS, LibModel
from jarsmith.errors import ConfigurationError, PipelineError


class MockBuildStep(BuildStep):
    """模拟构建步骤"""

    def __init__(self, name="mock", result="context", exc=None):
        super().__init__(name, "Mock step")
        self.result = result
        self.exc = exc
        self.execute_called = False
        self.execute_context = None

    def execute(self, context):
        self.execute_called = True
        self.execute_context = context
        if self.exc is not None:
            raise self.exc
        if self.result is None:
            return None
        return context.with_artifact(self.name, Path(self.name))


class FakeCompiler:
    """把每个 .java 文件“编译”成同名 .class 文件"""

    def __init__(self):
        self.calls = []

    def compile(self, source_paths, classpath, dest_dir, options):
        self.calls.append((list(source_paths), list(classpath), dest_dir, list(options)))
        for source in source_paths:
            (Path(dest_dir) / (Path(source).stem + ".class")).write_bytes(b"\xca\xfe" + source.name.encode())


@pytest.fixture
def config(tmp_path):
    return BuildConfig(
        lib="com.acme/app",
        version="1.0",
        main_class="Main",
        target_dir=tmp_path / "target",
        java_paths=[tmp_path / "src"],
        src_pom=tmp_path / "pom.xml",
        jar={"jdk_spec": "17"},
    )


@pytest.fixture
def context(config):
    return BuildContext.from_config(config)


class TestBuildContext:
    """BuildContext 测试"""

    def test_from_config(self, tmp_path, config):
        context = BuildContext.from_config(config)

        assert context.params is config
        assert context.target_dir == tmp_path / "target"
        assert context.class_dir == tmp_path / "target" / "classes"
        assert context.jar_file == tmp_path / "target" / "app-1.0.jar"
        assert context.uber_file == tmp_path / "target" / "app-1.0-standalone.jar"
        assert context.uber_dir == tmp_path / "target" / "uber"
        assert dict(context.artifacts) == {}
        assert context.conflicts == ()

    def test_is_immutable(self, context):
        with pytest.raises(AttributeError):
            context.conflicts = ("x",)
        with pytest.raises(TypeError):
            context.artifacts["jar"] = Path("x")

    def test_with_artifact_returns_new_context(self, context):
        updated = context.with_artifact("jar", Path("a.jar"))

        assert updated is not context
        assert updated.artifact("jar") == Path("a.jar")
        assert context.artifact("jar") is None

    def test_with_conflicts_appends(self, context):
        updated = context.with_conflicts(["a"]).with_conflicts(["b", "a"])
        assert updated.conflicts == ("a", "b", "a")
        assert context.conflicts == ()

    def test_lib_paths_in_declaration_order(self, tmp_path, config):
        config = config.model_copy(update={
            "libs": {
                "b": LibModel(paths=[tmp_path / "b1.jar", tmp_path / "b2.jar"]),
                "a": LibModel(paths=[tmp_path / "a.jar"]),
            }
        })
        context = BuildContext.from_config(config)

        assert context.lib_paths() == (tmp_path / "b1.jar", tmp_path / "b2.jar", tmp_path / "a.jar")
        assert isinstance(context.libs, MappingProxyType)


class TestBuildPipeline:
    """BuildPipeline 测试"""

    def test_default_steps(self):
        pipeline = BuildPipeline()
        assert [step.name for step in pipeline.get_steps()] == DEFAULT_TASKS

    def test_from_tasks(self):
        pipeline = BuildPipeline.from_tasks(["clean", "jar", "end"])
        steps = pipeline.get_steps()
        assert isinstance(steps[0], CleanStep)
        assert isinstance(steps[1], JarStep)
        assert isinstance(steps[2], EndStep)

    def test_from_unknown_task(self):
        with pytest.raises(ConfigurationError):
            BuildPipeline.from_tasks(["clean", "deploy"])

    def test_add_and_remove_steps(self):
        pipeline = BuildPipeline([])
        first, second = MockBuildStep("first"), MockBuildStep("second")

        pipeline.add_step(second)
        pipeline.add_step(first, position=0)
        assert [s.name for s in pipeline.get_steps()] == ["first", "second"]

        pipeline.remove_step("first")
        assert [s.name for s in pipeline.get_steps()] == ["second"]

    def test_get_steps_returns_copy(self):
        pipeline = BuildPipeline([MockBuildStep()])
        pipeline.get_steps().clear()
        assert len(pipeline.get_steps()) == 1

    def test_execute_threads_context(self, context):
        first, second = MockBuildStep("first"), MockBuildStep("second")
        run = BuildPipeline([first, second]).execute(context)

        assert first.execute_context is context
        assert second.execute_context.artifact("first") == Path("first")
        assert run.context.artifact("second") == Path("second")
        assert run.executed == ["first", "second"]
        assert not run.terminated

    def test_none_stops_pipeline(self, context):
        first = MockBuildStep("first")
        stopper = MockBuildStep("stop", result=None)
        never = MockBuildStep("never")

        run = BuildPipeline([first, stopper, never]).execute(context)

        assert run.terminated_by == "stop"
        assert run.executed == ["first", "stop"]
        assert not never.execute_called
        assert run.context.artifact("first") == Path("first")

    def test_failure_is_wrapped(self, context):
        cause = OSError("disk full")
        failing = MockBuildStep("bad", exc=cause)
        never = MockBuildStep("never")

        with pytest.raises(PipelineError) as exc_info:
            BuildPipeline([failing, never]).execute(context)

        assert exc_info.value.step_name == "bad"
        assert exc_info.value.__cause__ is cause
        assert not never.execute_called

    def test_empty_pipeline(self, context):
        run = BuildPipeline([]).execute(context)
        assert run.context is context
        assert run.executed == []

    def test_validate_pipeline(self):
        assert BuildPipeline().validate_pipeline() == []
        assert BuildPipeline([]).validate_pipeline() == ["构建管道中没有步骤"]

        errors = BuildPipeline([MockBuildStep("a"), MockBuildStep("a")]).validate_pipeline()
        assert any("重复" in e for e in errors)

        errors = BuildPipeline.from_tasks(["clean", "end", "jar"]).validate_pipeline()
        assert any("jar" in e for e in errors)

    def test_run_pipeline_helper(self, context):
        run = run_pipeline(context, ["end"])
        assert run.terminated_by == "end"


class TestBuilder:
    """Builder 端到端测试"""

    @pytest.fixture
    def project(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "Main.java").write_text("public class Main {}")
        (src / "Util.java").write_text("class Util {}")

        resources = tmp_path / "resources"
        resources.mkdir()
        (resources / "app.properties").write_text("name=app\n")

        (tmp_path / "pom.xml").write_text("<project/>")

        dep = tmp_path / "dep.jar"
        with zipfile.ZipFile(dep, "w") as zf:
            zf.writestr("Util.class", b"dependency")
            zf.writestr("dep/Dep.class", b"dep")

        return tmp_path

    @pytest.fixture
    def project_config(self, project):
        return BuildConfig(
            lib="com.acme/app",
            version="1.0",
            main_class="Main",
            target_dir=project / "target",
            java_paths=[project / "src"],
            resource_dirs=[project / "resources"],
            src_pom=project / "pom.xml",
            libs={"dep": LibModel(paths=[project / "dep.jar"])},
            jar={"jdk_spec": "17"},
        )

    def _pipeline(self, compiler):
        return BuildPipeline([
            CleanStep(),
            JavacStep(compiler=compiler),
            ResourcesStep(),
            SyncPomStep(),
            JarStep(),
            UberStep(),
        ])

    def test_full_build(self, project, project_config):
        compiler = FakeCompiler()
        result = Builder(self._pipeline(compiler)).build(project_config)

        assert result.success, result.error
        assert result.executed == DEFAULT_TASKS
        assert result.artifacts["jar"] == project / "target" / "app-1.0.jar"
        assert result.artifacts["uber"] == project / "target" / "app-1.0-standalone.jar"
        assert "Util.class" in result.conflicts

        sources, classpath, dest_dir, _ = compiler.calls[0]
        assert [p.name for p in sources] == ["Main.java", "Util.java"]
        assert classpath == [project / "dep.jar"]
        assert dest_dir == project / "target" / "classes"

        with zipfile.ZipFile(result.artifacts["jar"]) as zf:
            names = zf.namelist()
            assert names[0] == MANIFEST_NAME
            assert "Main.class" in names
            assert "app.properties" in names
            assert "META-INF/maven/com.acme/app/pom.xml" in names
            assert "META-INF/maven/com.acme/app/pom.properties" in names

        with zipfile.ZipFile(result.artifacts["uber"]) as zf:
            assert zf.read("Util.class") == b"\xca\xfeUtil.java"
            assert zf.read("dep/Dep.class") == b"dep"
        assert read_manifest(result.artifacts["uber"]).main_class == "Main"

    def test_end_task_stops_build(self, project_config):
        result = Builder().build(project_config, ["clean", "end", "jar"])

        assert result.success
        assert result.executed == ["clean", "end"]
        assert result.terminated_by == "end"
        assert "jar" not in result.artifacts

    def test_failed_step(self, project, project_config):
        (project / "pom.xml").unlink()
        result = Builder().build(project_config, ["clean", "sync-pom"])

        assert not result.success
        assert result.failed_step == "sync-pom"
        assert "POM" in result.error

    def test_unknown_task(self, project_config):
        result = Builder().build(project_config, ["nope"])
        assert not result.success
        assert "nope" in result.error

    def test_explicit_pipeline_is_used(self, project_config):
        step = MockBuildStep("custom")
        result = Builder(BuildPipeline([step])).build(project_config)

        assert step.execute_called
        assert result.executed == ["custom"]
        assert result.artifacts == {"custom": Path("custom")}

    def test_uber_requires_jar(self, project_config):
        result = Builder().build(project_config, ["clean", "uber"])
        assert not result.success
        assert result.failed_step == "uber"
