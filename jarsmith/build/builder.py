"""
构建器主类

把配置转换成初始上下文并执行构建管道，对外返回统一的构建结果。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..config.schema import BuildConfig
from ..errors import BuildError, PipelineError
from ..utils.logging import info, success, LogStage
from .build_context import BuildContext
from .build_pipeline import BuildPipeline, PipelineRun


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    artifacts: Dict[str, Path] = field(default_factory=dict)
    conflicts: List[str] = field(default_factory=list)
    executed: List[str] = field(default_factory=list)
    terminated_by: Optional[str] = None
    build_time: Optional[float] = None
    failed_step: Optional[str] = None
    error: Optional[str] = None


class Builder:
    """构建器

    使用管道模式协调构建步骤，提供统一的构建接口。
    """

    def __init__(self, pipeline: Optional[BuildPipeline] = None):
        self.pipeline = pipeline

    def get_pipeline(self, config: BuildConfig, tasks: Optional[Iterable[str]] = None) -> BuildPipeline:
        """获取要执行的管道：显式传入的管道优先，否则按任务名创建"""
        if self.pipeline is not None:
            return self.pipeline
        return BuildPipeline.from_tasks(tasks if tasks is not None else config.tasks)

    def build(self, config: BuildConfig, tasks: Optional[Iterable[str]] = None) -> BuildResult:
        """执行构建

        Args:
            config: 配置对象
            tasks: 要执行的任务名，None 时使用配置中的 tasks

        Returns:
            BuildResult: 构建结果，失败时 success 为 False 并带有错误信息
        """
        info(f"开始构建 {config.lib} {config.version}", stage=LogStage.INIT)

        try:
            pipeline = self.get_pipeline(config, tasks)
            run: PipelineRun = pipeline.execute(BuildContext.from_config(config))
        except PipelineError as e:
            return BuildResult(success=False, failed_step=e.step_name, error=str(e))
        except BuildError as e:
            return BuildResult(success=False, error=str(e))

        result = BuildResult(
            success=True,
            artifacts=dict(run.context.artifacts),
            conflicts=list(run.context.conflicts),
            executed=run.executed,
            terminated_by=run.terminated_by,
            build_time=run.elapsed,
        )

        for name, path in result.artifacts.items():
            info(f"  {name}: {path}", stage=LogStage.DONE)
        success("构建完成", stage=LogStage.DONE)
        return result
