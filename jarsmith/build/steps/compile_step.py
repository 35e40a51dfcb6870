"""
Java 编译步骤模块

通过 Compiler 接口调用编译器，默认实现是在子进程中执行 javac。
"""

import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from ...errors import CompileError
from ...utils import ensure_directory
from ...utils.logging import info, success, debug, error, LogStage
from jarsmith.build.build_context import BuildContext
from jarsmith.build.collector import FileCollector, suffixes
from .build_step import BuildStep


class Compiler(Protocol):
    """编译器接口"""

    def compile(
        self,
        source_paths: Sequence[Path],
        classpath: Sequence[Path],
        dest_dir: Path,
        options: Sequence[str],
    ) -> None:
        """编译 source_paths 到 dest_dir

        Raises:
            CompileError: 编译失败
        """
        ...


class JavacCompiler:
    """调用系统 javac 的编译器"""

    def __init__(self, executable: str = "javac", timeout: Optional[int] = None):
        self.executable = executable
        self.timeout = timeout

    def build_command(
        self,
        source_paths: Sequence[Path],
        classpath: Sequence[Path],
        dest_dir: Path,
        options: Sequence[str],
    ) -> List[str]:
        cmd = [self.executable]
        if classpath:
            cmd.extend(["-classpath", os.pathsep.join(str(p) for p in classpath)])
        cmd.extend(["-d", str(dest_dir)])
        cmd.extend(options)
        cmd.extend(str(p) for p in source_paths)
        return cmd

    def compile(
        self,
        source_paths: Sequence[Path],
        classpath: Sequence[Path],
        dest_dir: Path,
        options: Sequence[str],
    ) -> None:
        cmd = self.build_command(source_paths, classpath, dest_dir, options)
        debug(f"执行: {' '.join(cmd[:6])} ... ({len(source_paths)} 个源文件)", stage=LogStage.COMPILE)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise CompileError(f"找不到编译器 {self.executable}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise CompileError(f"编译超时 ({self.timeout}s)") from e

        if result.returncode != 0:
            diagnostics = (result.stderr or result.stdout).strip()
            raise CompileError(f"javac 返回 {result.returncode}", diagnostics)

        if result.stderr.strip():
            # 警告信息
            info(result.stderr.strip(), stage=LogStage.COMPILE)


class JavacStep(BuildStep):
    """Java 编译步骤"""

    def __init__(self, compiler: Optional[Compiler] = None):
        super().__init__("javac", "编译 Java 源码")
        self.compiler = compiler or JavacCompiler()

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        info("编译 Java", stage=LogStage.COMPILE)

        collector = FileCollector(suffixes(".java"))
        java_files = [f.path for f in collector.collect(context.params.java_paths)]
        if not java_files:
            info("没有找到 Java 源文件，跳过编译", stage=LogStage.COMPILE)
            return context

        try:
            class_dir = ensure_directory(context.class_dir)
            self.compiler.compile(
                java_files,
                list(context.lib_paths()),
                class_dir,
                list(context.params.javac_opts),
            )
        except CompileError as e:
            error(f"编译失败: {e}", stage=LogStage.COMPILE)
            if e.diagnostics:
                error(e.diagnostics, stage=LogStage.COMPILE)
            raise

        success(f"编译完成 - {len(java_files)} 个源文件", stage=LogStage.COMPILE)
        return context.with_artifact("classes", class_dir)
