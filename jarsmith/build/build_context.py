"""
构建上下文模块

定义在构建步骤之间传递的上下文。上下文是不可变的：
每个步骤返回一个新的上下文，而不是修改收到的那个。
"""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..config.schema import BuildConfig
from ..errors import BuildError, ConfigurationError  # noqa: F401  重新导出


def _freeze_libs(config: BuildConfig) -> Mapping[str, Tuple[Path, ...]]:
    return MappingProxyType({
        lib_id: tuple(lib.paths) for lib_id, lib in config.libs.items()
    })


@dataclass(frozen=True)
class BuildContext:
    """构建上下文，包含构建参数、已解析依赖和已产出的构件"""
    params: BuildConfig
    libs: Mapping[str, Tuple[Path, ...]] = field(default_factory=lambda: MappingProxyType({}))
    artifacts: Mapping[str, Path] = field(default_factory=lambda: MappingProxyType({}))
    conflicts: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: BuildConfig) -> 'BuildContext':
        """从配置创建初始上下文"""
        return cls(params=config, libs=_freeze_libs(config))

    @property
    def target_dir(self) -> Path:
        return Path(self.params.target_dir)

    @property
    def class_dir(self) -> Path:
        return self.target_dir / "classes"

    @property
    def jar_file(self) -> Path:
        return self.target_dir / self.params.jar_name

    @property
    def uber_file(self) -> Path:
        return self.target_dir / self.params.uber_name

    @property
    def uber_dir(self) -> Path:
        return self.target_dir / "uber"

    def lib_paths(self) -> Tuple[Path, ...]:
        """按依赖声明顺序展开的所有路径"""
        return tuple(path for paths in self.libs.values() for path in paths)

    def evolve(self, **changes: Any) -> 'BuildContext':
        """返回替换了指定字段的新上下文"""
        return dataclasses.replace(self, **changes)

    def with_artifact(self, name: str, path: Path) -> 'BuildContext':
        """记录一个新产出的构件"""
        artifacts: Dict[str, Path] = dict(self.artifacts)
        artifacts[name] = Path(path)
        return self.evolve(artifacts=MappingProxyType(artifacts))

    def with_conflicts(self, conflicts: Iterable[str]) -> 'BuildContext':
        """追加冲突记录"""
        return self.evolve(conflicts=self.conflicts + tuple(conflicts))

    def artifact(self, name: str) -> Optional[Path]:
        return self.artifacts.get(name)
