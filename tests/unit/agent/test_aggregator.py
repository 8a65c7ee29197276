"""
诊断聚合器单元测试
"""
import asyncio
from typing import List, Optional

import pytest

from netprobe.agent.aggregator import (
    INVALID_TARGET_MESSAGE,
    DiagnosticAggregator,
    InvalidTargetError,
    is_safe_host,
    parse_port,
    validate_target,
)
from netprobe.integrations.network_tools import GATEWAY_NOT_DETECTED, NetworkTools
from netprobe.models.results import ProbeResult


def ok(command: str, stdout: str = "output") -> ProbeResult:
    return ProbeResult(ok=True, stdout=stdout, stderr="", command=command)


def failed(command: str, stderr: str = "命令不存在") -> ProbeResult:
    return ProbeResult(ok=False, stdout="", stderr=stderr, command=command)


class FakeTools(NetworkTools):
    """记录调用的假工具集"""

    def __init__(self, gateway: Optional[str] = "172.17.0.1", fail: bool = False, raise_errors: bool = False):
        super().__init__(runner=None)
        self.gateway = gateway
        self.fail = fail
        self.raise_errors = raise_errors
        self.calls: List[str] = []

    async def _result(self, name: str, command: str) -> ProbeResult:
        self.calls.append(name)
        if self.raise_errors:
            raise RuntimeError(f"{name} crashed")
        return failed(command) if self.fail else ok(command)

    async def get_routing_table(self) -> ProbeResult:
        return await self._result("routing_table", "netstat -nrv")

    async def get_interfaces(self) -> ProbeResult:
        return await self._result("interfaces", "ifconfig -a")

    async def get_default_gateway(self) -> Optional[str]:
        self.calls.append("default_gateway")
        if self.raise_errors:
            raise RuntimeError("gateway crashed")
        return self.gateway

    async def ping_gateway(self, gateway: Optional[str]) -> ProbeResult:
        if not gateway:
            return await super().ping_gateway(gateway)
        return await self._result("ping_gateway", f"ping -c 4 {gateway}")

    async def traceroute(self, destination: str) -> ProbeResult:
        return await self._result("traceroute", f"traceroute -n {destination}")


class CountingPortChecker:
    """记录调用次数的端口检测函数"""

    def __init__(self, reachable: bool = True, error: Optional[Exception] = None):
        self.reachable = reachable
        self.error = error
        self.calls = 0

    async def __call__(self, host: str, port: int, timeout_ms: int) -> bool:
        self.calls += 1
        if self.error:
            raise self.error
        return self.reachable


def run(coro):
    return asyncio.run(coro)


class TestValidation:
    """目标校验测试"""

    @pytest.mark.parametrize("host", [
        "not a host!!",
        "8.8.8.8; rm -rf /",
        "$(reboot)",
        "host|cat",
        "a/b",
        "",
        None,
        "-f",
        "--help",
    ])
    def test_unsafe_hosts(self, host):
        """测试包含非法字符的主机被拒绝"""
        assert is_safe_host(host) is False

    @pytest.mark.parametrize("host", ["8.8.8.8", "example.com", "db_01.internal", "fe80::1", "my-host"])
    def test_safe_hosts(self, host):
        """测试合法的IP和主机名"""
        assert is_safe_host(host) is True

    @pytest.mark.parametrize("port, expected", [
        ("53", 53),
        (443, 443),
        (" 8080 ", 8080),
        ("0", None),
        ("65536", None),
        ("abc", None),
        ("", None),
        (None, None),
    ])
    def test_parse_port(self, port, expected):
        """测试端口解析"""
        assert parse_port(port) == expected

    def test_validate_target(self):
        """测试合法目标"""
        assert validate_target("8.8.8.8", "53") == ("8.8.8.8", 53)

    def test_invalid_target_message(self):
        """测试校验失败的提示信息"""
        with pytest.raises(InvalidTargetError) as exc_info:
            validate_target("not a host!!", "53")

        assert str(exc_info.value) == INVALID_TARGET_MESSAGE


class TestDiagnosticAggregator:
    """诊断聚合器测试"""

    @pytest.mark.parametrize("host, port", [
        ("not a host!!", "53"),
        ("8.8.8.8;id", "53"),
        ("8.8.8.8", "abc"),
        ("8.8.8.8", ""),
    ])
    def test_invalid_target_runs_no_probes(self, host, port):
        """测试校验失败时不执行任何探测"""
        tools = FakeTools()
        checker = CountingPortChecker()
        aggregator = DiagnosticAggregator(tools=tools, port_checker=checker)

        with pytest.raises(InvalidTargetError):
            run(aggregator.diagnose(host, port))

        assert tools.calls == []
        assert checker.calls == 0

    def test_full_report(self):
        """测试所有探测成功"""
        tools = FakeTools(gateway="172.17.0.1")
        checker = CountingPortChecker(reachable=True)
        report = run(DiagnosticAggregator(tools=tools, port_checker=checker).diagnose("8.8.8.8", "53"))

        assert report.host == "8.8.8.8"
        assert report.port == 53
        assert report.port_check.reachable is True
        assert report.port_check.error is None
        assert report.gateway == "172.17.0.1"
        assert report.gateway_ping.command == "ping -c 4 172.17.0.1"
        assert report.traceroute.command == "traceroute -n 8.8.8.8"
        assert [title for title, _ in report.sections()] == [
            "路由表", "网络接口", "网关 Ping (172.17.0.1)", "Traceroute"
        ]
        assert set(tools.calls) == {
            "routing_table", "interfaces", "default_gateway", "ping_gateway", "traceroute"
        }
        assert checker.calls == 1

    def test_gateway_before_ping(self):
        """测试网关检测先于网关ping执行"""
        tools = FakeTools()
        run(DiagnosticAggregator(tools=tools, port_checker=CountingPortChecker()).diagnose("8.8.8.8", 53))

        assert tools.calls.index("default_gateway") < tools.calls.index("ping_gateway")

    def test_no_gateway(self):
        """测试未检测到网关时网关ping为失败结果且未执行ping"""
        tools = FakeTools(gateway=None)
        report = run(DiagnosticAggregator(tools=tools, port_checker=CountingPortChecker()).diagnose("8.8.8.8", 53))

        assert report.gateway is None
        assert report.gateway_ping.ok is False
        assert report.gateway_ping.stderr == GATEWAY_NOT_DETECTED
        assert "ping_gateway" not in tools.calls

    def test_all_probes_fail(self):
        """测试全部探测失败时仍生成报告"""
        tools = FakeTools(gateway=None, fail=True)
        checker = CountingPortChecker(reachable=False)
        report = run(DiagnosticAggregator(tools=tools, port_checker=checker).diagnose("example.com", 443))

        assert report.port_check.reachable is False
        assert all(not result.ok for _, result in report.sections())
        assert report.routing_table.command == "netstat -nrv"

    def test_probe_exceptions_are_isolated(self):
        """测试探测抛出异常时转换为失败结果，报告仍然生成"""
        tools = FakeTools(raise_errors=True)
        checker = CountingPortChecker(error=RuntimeError("socket crashed"))
        report = run(DiagnosticAggregator(tools=tools, port_checker=checker).diagnose("8.8.8.8", 53))

        assert report.port_check.reachable is None
        assert "socket crashed" in report.port_check.error
        assert report.routing_table.ok is False
        assert "routing_table crashed" in report.routing_table.stderr
        assert report.gateway is None
        assert report.gateway_ping.stderr == GATEWAY_NOT_DETECTED
        assert report.traceroute.command == "traceroute -n 8.8.8.8"

    def test_independent_probes_run_concurrently(self):
        """测试端口检测、路由表和接口探测并发执行"""

        class SlowTools(FakeTools):
            async def get_routing_table(self):
                await asyncio.sleep(0.3)
                return ok("netstat -nrv")

            async def get_interfaces(self):
                await asyncio.sleep(0.3)
                return ok("ifconfig -a")

        class SlowChecker(CountingPortChecker):
            async def __call__(self, host, port, timeout_ms):
                await asyncio.sleep(0.3)
                return True

        async def timed():
            loop = asyncio.get_running_loop()
            start = loop.time()
            await DiagnosticAggregator(tools=SlowTools(), port_checker=SlowChecker()).diagnose("8.8.8.8", 53)
            return loop.time() - start

        assert run(timed()) < 0.8
