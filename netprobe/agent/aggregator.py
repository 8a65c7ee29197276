"""
诊断聚合器

编排端口检测和各项网络探测，合并为一份允许部分失败的诊断报告
"""
import asyncio
import re
import time
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..integrations.network_tools import NetworkTools
from ..integrations.port_checker import DEFAULT_TIMEOUT_MS, check_port
from ..models.report import DiagnosticReport
from ..models.results import PortCheckResult, ProbeResult

# 只允许字母、数字、下划线、点、冒号和连字符（IP/简单主机名），防止参数注入
SAFE_HOST_PATTERN = re.compile(r"^[A-Za-z0-9_.:-]+$")

INVALID_TARGET_MESSAGE = "主机或端口无效"

PortChecker = Callable[[str, int, int], Awaitable[bool]]


class InvalidTargetError(ValueError):
    """主机或端口校验失败"""
    pass


def is_safe_host(host: Any) -> bool:
    """
    检查主机参数是否可以安全传给诊断命令

    Args:
        host: 主机IP或主机名

    Returns:
        合法返回True
    """
    if not host or not isinstance(host, str):
        return False
    if not SAFE_HOST_PATTERN.match(host):
        return False
    # 以"-"开头会被命令当作选项
    return not host.startswith("-")


def parse_port(port: Any) -> Optional[int]:
    """解析端口号，非法时返回None"""
    try:
        value = int(str(port).strip())
    except (TypeError, ValueError):
        return None
    if 1 <= value <= 65535:
        return value
    return None


def validate_target(host: Any, port: Any) -> Tuple[str, int]:
    """
    校验诊断目标

    Args:
        host: 主机IP或主机名
        port: 端口（字符串或整数）

    Returns:
        (host, port)

    Raises:
        InvalidTargetError: 主机包含非法字符或端口无效
    """
    port_number = parse_port(port)
    if not is_safe_host(host) or port_number is None:
        raise InvalidTargetError(INVALID_TARGET_MESSAGE)
    return host, port_number


class DiagnosticAggregator:
    """
    诊断聚合器

    执行顺序：
        1. 校验目标，失败直接返回错误，不执行任何探测
        2. 并发执行：端口检测 / 路由表 / 网络接口
        3. 并发执行：默认网关检测 → 网关ping（串行依赖） / traceroute
        4. 组装报告

    任何单个探测的异常都被转换为该探测的失败结果，报告总能生成
    """

    def __init__(
        self,
        tools: Optional[NetworkTools] = None,
        port_checker: PortChecker = check_port,
        port_timeout_ms: int = DEFAULT_TIMEOUT_MS
    ):
        """
        初始化诊断聚合器

        Args:
            tools: 网络诊断工具集
            port_checker: TCP端口检测函数
            port_timeout_ms: TCP连接超时（毫秒）
        """
        self.tools = tools or NetworkTools()
        self.port_checker = port_checker
        self.port_timeout_ms = port_timeout_ms

    async def diagnose(self, host: Any, port: Any) -> DiagnosticReport:
        """
        执行端口诊断

        Args:
            host: 目标主机
            port: 目标端口

        Returns:
            DiagnosticReport: 诊断报告

        Raises:
            InvalidTargetError: 主机或端口无效（此时不会执行任何探测）
        """
        host, port = validate_target(host, port)
        start = time.monotonic()

        port_check, routing_table, interfaces = await asyncio.gather(
            self._check_port(host, port),
            self._probe(self.tools.get_routing_table(), "routing table"),
            self._probe(self.tools.get_interfaces(), "interfaces"),
        )

        (gateway, gateway_ping), traceroute = await asyncio.gather(
            self._gateway_chain(),
            self._probe(self.tools.traceroute(host), f"traceroute -n {host}"),
        )

        return DiagnosticReport(
            host=host,
            port=port,
            port_check=port_check,
            routing_table=routing_table,
            interfaces=interfaces,
            gateway=gateway,
            gateway_ping=gateway_ping,
            traceroute=traceroute,
            total_time=time.monotonic() - start
        )

    async def _check_port(self, host: str, port: int) -> PortCheckResult:
        try:
            reachable = await self.port_checker(host, port, self.port_timeout_ms)
        except Exception as e:
            return PortCheckResult(host=host, port=port, error=str(e), timeout_ms=self.port_timeout_ms)
        return PortCheckResult(host=host, port=port, reachable=bool(reachable), timeout_ms=self.port_timeout_ms)

    async def _gateway_chain(self) -> Tuple[Optional[str], ProbeResult]:
        """默认网关检测 → 网关ping"""
        try:
            gateway = await self.tools.get_default_gateway()
        except Exception as e:
            print(f"[Aggregator] 默认网关检测异常: {e}")
            gateway = None

        label = f"ping -c {self.tools.ping_count} {gateway}" if gateway else "ping"
        gateway_ping = await self._probe(self.tools.ping_gateway(gateway), label)
        return gateway, gateway_ping

    @staticmethod
    async def _probe(probe: Awaitable[ProbeResult], label: str) -> ProbeResult:
        """执行单个探测，异常转换为失败结果"""
        try:
            return await probe
        except Exception as e:
            print(f"[Aggregator] 探测异常 ({label}): {e}")
            return ProbeResult(ok=False, stdout="", stderr=f"探测执行异常: {e}", command=label)
