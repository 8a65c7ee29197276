"""
探测结果相关数据模型
定义单个诊断命令和TCP端口检测的结果
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ProbeResult:
    """
    探测结果

    记录单个诊断命令的执行结果。失败时也保留已捕获的stdout/stderr
    """
    ok: bool                            # 是否执行成功
    stdout: str                         # 标准输出
    stderr: str                         # 标准错误输出（失败时为失败原因）
    command: str                        # 执行的命令（展示用）
    exit_code: Optional[int] = None     # 退出码（未找到命令或超时时为None）
    execution_time: float = 0.0         # 执行耗时（秒）

    def __str__(self) -> str:
        status = "OK" if self.ok else "FAIL"
        return f"[{status}] {self.command} (exit={self.exit_code}, time={self.execution_time:.2f}s)"

    def has_output(self) -> bool:
        """成功且标准输出非空"""
        return self.ok and bool(self.stdout.strip())

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "ok": self.ok,
            "command": self.command,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "execution_time": self.execution_time
        }


@dataclass
class PortCheckResult:
    """
    TCP端口检测结果

    reachable 和 error 二选一：连接超时与连接被拒绝不做区分
    """
    host: str
    port: int
    reachable: Optional[bool] = None
    error: Optional[str] = None
    timeout_ms: int = 3000

    def describe(self) -> str:
        """生成可读的检测结论"""
        if self.error is not None:
            return f"TCP检测过程中发生错误: {self.error}"
        if self.reachable:
            return f"主机 {self.host} 的端口 {self.port} 可达 (TCP connect OK)。"
        return f"主机 {self.host} 的端口 {self.port} 不可达 (超时或错误)。"

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"host": self.host, "port": self.port, "error": self.error}
        return {"host": self.host, "port": self.port, "reachable": bool(self.reachable)}
