"""
本地命令执行器

以参数列表方式（不经过shell）执行诊断命令，统一返回ProbeResult
"""
import asyncio
import time
from typing import List, Optional, Sequence, Set

from ..models.results import ProbeResult


DEFAULT_TIMEOUT = 8.0

# 子进程被kill后等待管道关闭的上限（孙进程可能仍持有管道）
_DRAIN_GRACE = 1.0


class CommandRunner:
    """
    命令执行器

    - 只接受可执行文件名 + 参数列表，参数不会拼接成shell命令行
    - 每次调用只启动一个子进程，超时后kill并回收，不留僵尸进程
    - 所有失败都以 ok=False 的结果返回，不向调用方抛出异常
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """
        初始化命令执行器

        Args:
            timeout: 单条命令的超时时间（秒）
        """
        self.timeout = timeout
        self._running: Set[asyncio.Task] = set()

    async def run(
        self,
        file: str,
        args: Optional[Sequence[str]] = None,
        label: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> ProbeResult:
        """
        执行命令

        调用方被取消时，子进程仍会运行到自身超时并被清理

        Args:
            file: 可执行文件名（例如：ip, netstat, traceroute）
            args: 参数列表
            label: 展示用的命令描述，默认为 file + args
            timeout: 超时时间（秒），默认使用实例配置

        Returns:
            ProbeResult: 执行结果
        """
        argv = [file, *(args or [])]
        label = label or " ".join(argv)
        task = asyncio.ensure_future(self._execute(argv, label, timeout or self.timeout))
        self._running.add(task)
        task.add_done_callback(self._running.discard)
        return await asyncio.shield(task)

    async def _execute(self, argv: List[str], label: str, timeout: float) -> ProbeResult:
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            # 命令不存在或无执行权限
            print(f"[CommandRunner] 无法启动 '{label}': {e}")
            return ProbeResult(
                ok=False,
                stdout="",
                stderr=f"无法执行命令 {argv[0]}: {e}",
                command=label,
                execution_time=time.monotonic() - start
            )

        out_buf = bytearray()
        err_buf = bytearray()
        readers = [
            asyncio.ensure_future(self._drain(proc.stdout, out_buf)),
            asyncio.ensure_future(self._drain(proc.stderr, err_buf)),
        ]

        waiter = asyncio.ensure_future(proc.wait())
        try:
            _, pending = await asyncio.wait([waiter, *readers], timeout=timeout)
            timed_out = bool(pending)
        finally:
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
            # 等待管道读完剩余数据，超出上限则放弃
            _, pending = await asyncio.wait(readers, timeout=_DRAIN_GRACE)
            for reader in pending:
                reader.cancel()

        stdout = out_buf.decode('utf-8', errors='replace')
        stderr = err_buf.decode('utf-8', errors='replace')
        elapsed = time.monotonic() - start

        if timed_out:
            print(f"[CommandRunner] 命令超时({timeout}s): {label}")
            return ProbeResult(
                ok=False,
                stdout=stdout,
                stderr=stderr if stderr.strip() else f"命令执行超时（{timeout:g}秒）",
                command=label,
                exit_code=None,
                execution_time=elapsed
            )

        if proc.returncode != 0:
            return ProbeResult(
                ok=False,
                stdout=stdout,
                stderr=stderr if stderr.strip() else f"命令退出码 {proc.returncode}",
                command=label,
                exit_code=proc.returncode,
                execution_time=elapsed
            )

        return ProbeResult(
            ok=True,
            stdout=stdout,
            stderr=stderr,
            command=label,
            exit_code=0,
            execution_time=elapsed
        )

    @staticmethod
    async def _drain(stream: Optional[asyncio.StreamReader], buf: bytearray):
        """持续读取管道，保证超时前已输出的内容不会丢失"""
        if stream is None:
            return
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                break
            buf.extend(chunk)
