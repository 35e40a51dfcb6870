"""
构建管道模块

按顺序执行构建步骤：每个步骤接收上一个步骤返回的上下文，
任何步骤返回 None 时管道立即结束，抛出异常时管道中止。
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..errors import BuildError, PipelineError
from ..utils.logging import info, success, error, debug, LogStage
from .build_context import BuildContext
from .steps import BuildStep, create_step
from ..config.schema import DEFAULT_TASKS


@dataclass
class PipelineRun:
    """一次管道执行的结果"""
    context: BuildContext  # 最后一个有效的上下文
    executed: List[str] = field(default_factory=list)
    terminated_by: Optional[str] = None  # 返回 None 的步骤名
    elapsed: float = 0.0

    @property
    def terminated(self) -> bool:
        return self.terminated_by is not None


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self, steps: Optional[Iterable[BuildStep]] = None):
        if steps is None:
            steps = [create_step(task) for task in DEFAULT_TASKS]
        self._steps: List[BuildStep] = list(steps)

    @classmethod
    def from_tasks(cls, tasks: Iterable[str]) -> 'BuildPipeline':
        """按任务名列表创建管道

        Raises:
            ConfigurationError: 包含未知任务
        """
        return cls([create_step(task) for task in tasks])

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(self, context: BuildContext) -> PipelineRun:
        """执行构建管道

        Args:
            context: 初始上下文

        Returns:
            PipelineRun: 最终上下文以及执行过的步骤

        Raises:
            PipelineError: 某个步骤失败，原始异常保存在 __cause__ 中
        """
        run = PipelineRun(context=context)
        start_time = time.time()

        for step in self._steps:
            info(f"执行步骤: {step.name} - {step.description}", stage=LogStage.PIPELINE)
            try:
                next_context = step.execute(run.context)
            except Exception as e:
                run.elapsed = time.time() - start_time
                error(f"步骤 {step.name} 失败: {e}", stage=LogStage.PIPELINE)
                raise PipelineError(f"步骤 {step.name} 失败: {e}", step_name=step.name) from e

            run.executed.append(step.name)
            if next_context is None:
                run.terminated_by = step.name
                debug(f"步骤 {step.name} 终止了管道", stage=LogStage.PIPELINE)
                break
            run.context = next_context

        run.elapsed = time.time() - start_time
        success(f"管道执行完成，用时 {run.elapsed:.1f} 秒", stage=LogStage.PIPELINE)
        return run

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        seen = set()
        for index, step in enumerate(self._steps):
            if step.name in seen:
                errors.append(f"步骤 '{step.name}' 重复出现")
            seen.add(step.name)

            if step.name == "end" and index != len(self._steps) - 1:
                unreachable = ", ".join(s.name for s in self._steps[index + 1:])
                errors.append(f"步骤 'end' 之后的步骤不会执行: {unreachable}")

        return errors


def run_pipeline(context: BuildContext, tasks: Iterable[str]) -> PipelineRun:
    """便捷函数：按任务名执行管道"""
    return BuildPipeline.from_tasks(tasks).execute(context)


__all__ = ["BuildPipeline", "PipelineRun", "BuildError", "run_pipeline"]
