"""
配置系统单元测试

测试配置模型验证和加载器功能。
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from ruamel.yaml import YAML

from jarsmith.config.loader import (
    ConfigError,
    ConfigLoader,
    ConfigValidationError,
    load_config,
    save_config,
    validate_config,
    validate_config_with_result,
)
from jarsmith.config.schema import BuildConfig, DEFAULT_TASKS, JarModel, LibModel
from jarsmith.errors import ConfigurationError


def _write_yaml(path: Path, data) -> Path:
    yaml = YAML()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)
    return path


class TestLibModel:
    """LibModel 测试"""

    def test_single_path(self):
        lib = LibModel(paths="libs/a.jar")
        assert lib.paths == [Path("libs/a.jar")]

    def test_path_list(self):
        lib = LibModel(paths=["a.jar", "b.jar"])
        assert lib.paths == [Path("a.jar"), Path("b.jar")]


class TestJarModel:
    """JarModel 测试"""

    def test_defaults(self):
        jar = JarModel()
        assert jar.compress is True
        assert jar.reproducible is True
        assert jar.jdk_spec is None


class TestBuildConfig:
    """BuildConfig 测试"""

    def test_minimal_config(self):
        config = BuildConfig(lib="com.acme/app", version="1.0")

        assert config.tasks == DEFAULT_TASKS
        assert config.target_dir == Path("target")
        assert config.src_pom == Path("pom.xml")
        assert config.main_class is None
        assert config.coordinate == ("com.acme", "app")
        assert config.jar_name == "app-1.0.jar"
        assert config.uber_name == "app-1.0-standalone.jar"

    def test_bare_artifact(self):
        config = BuildConfig(lib="app", version="1.0")
        assert config.coordinate == ("app", "app")

    @pytest.mark.parametrize("lib", ["a/b/c", "a b", "group/", ""])
    def test_invalid_lib(self, lib):
        with pytest.raises(ValidationError):
            BuildConfig(lib=lib, version="1.0")

    @pytest.mark.parametrize("version", ["1.0/../x", "..", "a\\b"])
    def test_invalid_version(self, version):
        with pytest.raises(ValidationError):
            BuildConfig(lib="app", version=version)

    def test_unknown_task(self):
        with pytest.raises(ValidationError) as exc_info:
            BuildConfig(lib="app", version="1.0", tasks=["clean", "deploy"])
        assert "deploy" in str(exc_info.value)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            BuildConfig(lib="app", version="1.0", output="x")

    def test_main_class_with_newline(self):
        with pytest.raises(ValidationError):
            BuildConfig(lib="app", version="1.0", main_class="Main\nX: y")

    def test_target_dir_cannot_contain_sources(self, tmp_path):
        with pytest.raises(ValidationError):
            BuildConfig(
                lib="app",
                version="1.0",
                target_dir=tmp_path,
                java_paths=[tmp_path / "src"],
            )

    def test_lib_paths(self):
        config = BuildConfig(
            lib="app",
            version="1.0",
            libs={"a": {"paths": ["a1.jar", "a2.jar"]}, "b": {"paths": "b.jar"}},
        )
        assert config.lib_paths() == [Path("a1.jar"), Path("a2.jar"), Path("b.jar")]

    def test_to_dict_round_trip(self):
        config = BuildConfig(lib="app", version="1.0", main_class="Main", libs={"a": {"paths": ["a.jar"]}})
        data = config.to_dict()

        assert data["libs"] == {"a": {"paths": ["a.jar"]}}
        assert "main_class" in data
        assert BuildConfig.from_dict(data) == config


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_from_file_resolves_paths(self, tmp_path):
        config_path = _write_yaml(tmp_path / "build.yaml", {
            "lib": "com.acme/app",
            "version": "1.0",
            "main_class": "com.acme.Main",
            "java_paths": ["src/main/java"],
            "resource_dirs": ["src/main/resources"],
            "libs": {"org.dep/dep": {"paths": ["libs/dep.jar"]}},
            "tasks": ["clean", "jar"],
        })

        config = ConfigLoader().load_from_file(config_path)
        base = tmp_path.resolve()

        assert config.target_dir == base / "target"
        assert config.src_pom == base / "pom.xml"
        assert config.java_paths == [base / "src" / "main" / "java"]
        assert config.resource_dirs == [base / "src" / "main" / "resources"]
        assert config.libs["org.dep/dep"].paths == [base / "libs" / "dep.jar"]
        assert config.tasks == ["clean", "jar"]

    def test_absolute_paths_kept(self, tmp_path):
        absolute = tmp_path / "elsewhere" / "dep.jar"
        config = ConfigLoader().load_from_dict(
            {"lib": "app", "version": "1", "libs": {"d": {"paths": str(absolute)}}},
            base_path=tmp_path,
        )
        assert config.libs["d"].paths == [absolute]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "build.json"
        path.write_text("{}")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "build.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="为空"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "build.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_yaml_syntax_error(self, tmp_path):
        path = tmp_path / "build.yaml"
        path.write_text("lib: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_validation_error(self, tmp_path):
        path = _write_yaml(tmp_path / "build.yaml", {"lib": "app"})
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        error = exc_info.value
        assert isinstance(error, ConfigurationError)
        assert "version" in error.format_errors()
        assert json.loads(error.format_errors_json())[0]["loc"] == ["version"]

    def test_validate_config(self, tmp_path):
        good = _write_yaml(tmp_path / "good.yaml", {"lib": "app", "version": "1.0"})
        bad = _write_yaml(tmp_path / "bad.yaml", {"lib": "app", "version": "1.0", "tasks": ["deploy"]})

        assert validate_config(good) == []
        assert len(validate_config(bad)) == 1
        assert validate_config(tmp_path / "missing.yaml")[0]["type"] == "config_error"

    def test_validate_config_with_result(self, tmp_path):
        good = _write_yaml(tmp_path / "good.yaml", {"lib": "app", "version": "1.0"})
        result = validate_config_with_result(good)
        assert result.is_valid
        assert result.config.lib == "app"

        result = validate_config_with_result(tmp_path / "missing.yaml")
        assert not result.is_valid
        assert result.errors

    def test_save_and_reload(self, tmp_path):
        config = BuildConfig(
            lib="com.acme/app",
            version="1.0",
            target_dir=tmp_path / "target",
            src_pom=tmp_path / "pom.xml",
            libs={"d": {"paths": [str(tmp_path / "d.jar")]}},
        )
        output = tmp_path / "saved" / "build.yaml"

        save_config(config, output)
        reloaded = load_config(output)

        assert reloaded == config
