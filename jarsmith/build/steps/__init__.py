"""构建步骤

每个任务名对应一个步骤类，构建管道按任务名列表依次创建步骤。
"""

from typing import Callable, Dict

from ...errors import ConfigurationError
from .build_step import BuildStep
from .clean_step import CleanStep
from .compile_step import Compiler, JavacCompiler, JavacStep
from .end_step import EndStep
from .jar_step import JarStep
from .pom_step import SyncPomStep
from .resources_step import ResourcesStep
from .uber_step import UberStep

STEP_REGISTRY: Dict[str, Callable[[], BuildStep]] = {
    "clean": CleanStep,
    "javac": JavacStep,
    "resources": ResourcesStep,
    "sync-pom": SyncPomStep,
    "jar": JarStep,
    "uber": UberStep,
    "end": EndStep,
}


def create_step(task: str) -> BuildStep:
    """按任务名创建步骤

    Raises:
        ConfigurationError: 未知任务
    """
    try:
        factory = STEP_REGISTRY[task]
    except KeyError:
        raise ConfigurationError(
            f"未知任务: {task}，可用任务: {', '.join(STEP_REGISTRY)}"
        ) from None
    return factory()


__all__ = [
    "BuildStep",
    "CleanStep",
    "Compiler",
    "EndStep",
    "JarStep",
    "JavacCompiler",
    "JavacStep",
    "ResourcesStep",
    "STEP_REGISTRY",
    "SyncPomStep",
    "UberStep",
    "create_step",
]
