"""
配置 Schema 定义

使用 Pydantic 定义 build.yaml 的配置模型，支持验证和类型检查。
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

# 已知的构建任务名称，顺序即默认执行顺序
KNOWN_TASKS = ("clean", "javac", "resources", "sync-pom", "jar", "uber", "end")
DEFAULT_TASKS = ["clean", "javac", "resources", "sync-pom", "jar", "uber"]

_COORDINATE_PART = re.compile(r'^[A-Za-z0-9_.\-]+$')


class LibModel(BaseModel):
    """已解析的依赖：一个依赖 id 对应一组有序路径"""
    paths: List[Path] = Field(default_factory=list, description="依赖的 jar 文件或目录路径")

    @field_validator('paths', mode='before')
    @classmethod
    def validate_paths(cls, v: Any) -> Any:
        """允许直接写单个路径"""
        if isinstance(v, (str, Path)):
            return [v]
        return v


class JarModel(BaseModel):
    """归档输出配置"""
    compress: bool = Field(True, description="文件条目是否使用 Deflate 压缩，否则仅存储")
    reproducible: bool = Field(
        True,
        description="是否固定条目时间戳和权限，使相同输入得到逐字节相同的输出"
    )
    jdk_spec: Optional[str] = Field(
        None,
        description="写入 Build-Jdk-Spec 的版本，未设置时自动探测"
    )


class BuildConfig(BaseModel):
    """jarsmith 主配置模型

    对应 build.yaml 的根结构。
    """

    lib: str = Field(..., description="库坐标，形如 group/artifact", min_length=1)
    version: str = Field(..., description="版本号", min_length=1, max_length=64)
    main_class: Optional[str] = Field(None, description="入口类（写入 Main-Class）")

    target_dir: Path = Field(Path("target"), description="构建输出目录")
    java_paths: List[Path] = Field(default_factory=list, description="Java 源码目录")
    javac_opts: List[str] = Field(default_factory=list, description="额外的 javac 参数")
    src_pom: Path = Field(Path("pom.xml"), description="POM 源文件")
    resource_dirs: List[Path] = Field(default_factory=list, description="资源目录")

    libs: Dict[str, LibModel] = Field(default_factory=dict, description="已解析的依赖")
    tasks: List[str] = Field(default_factory=lambda: list(DEFAULT_TASKS), description="要执行的任务")
    jar: JarModel = Field(default_factory=JarModel, description="归档输出配置")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @field_validator('lib')
    @classmethod
    def validate_lib(cls, v: str) -> str:
        """验证库坐标格式"""
        parts = v.split('/')
        if len(parts) > 2 or not all(_COORDINATE_PART.match(p) for p in parts):
            raise ValueError("库坐标格式不正确，应为 artifact 或 group/artifact")
        return v

    @field_validator('version')
    @classmethod
    def validate_version(cls, v: str) -> str:
        """版本号会成为文件名的一部分，不允许路径字符"""
        if any(ch in v for ch in '/\\') or v.strip() in ('.', '..'):
            raise ValueError("版本号不能包含路径分隔符")
        return v

    @field_validator('main_class')
    @classmethod
    def validate_main_class(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            return None
        if v is not None and any(ch in v for ch in '\r\n'):
            raise ValueError("入口类不能包含换行")
        return v

    @field_validator('tasks')
    @classmethod
    def validate_tasks(cls, v: List[str]) -> List[str]:
        unknown = [t for t in v if t not in KNOWN_TASKS]
        if unknown:
            raise ValueError(f"未知任务: {', '.join(unknown)}，可用任务: {', '.join(KNOWN_TASKS)}")
        return v

    @model_validator(mode='after')
    def validate_target_dir(self) -> 'BuildConfig':
        """target_dir 不能与源码目录重合，否则 clean 会删掉源码"""
        target = self.target_dir.resolve()
        for source in [*self.java_paths, *self.resource_dirs]:
            source_resolved = source.resolve()
            if source_resolved == target or target in source_resolved.parents:
                raise ValueError(f"target_dir 不能包含源码或资源目录: {source}")
        return self

    @property
    def coordinate(self) -> Tuple[str, str]:
        """返回 (group_id, artifact_id)，没有 group 时两者相同"""
        if '/' in self.lib:
            group_id, artifact_id = self.lib.split('/', 1)
            return group_id, artifact_id
        return self.lib, self.lib

    @property
    def artifact_id(self) -> str:
        return self.coordinate[1]

    @property
    def jar_name(self) -> str:
        return f"{self.artifact_id}-{self.version}.jar"

    @property
    def uber_name(self) -> str:
        return f"{self.artifact_id}-{self.version}-standalone.jar"

    def lib_paths(self) -> List[Path]:
        """按声明顺序展开所有依赖路径"""
        return [path for lib in self.libs.values() for path in lib.paths]

    def to_dict(self) -> Dict[str, Any]:
        """转换为可写回 YAML 的字典"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj: Any) -> Any:
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            if isinstance(obj, list):
                return [convert_values(item) for item in obj]
            if isinstance(obj, Path):
                return obj.as_posix()
            return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)

