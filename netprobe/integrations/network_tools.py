"""
网络诊断工具

基于本地命令的诊断探测：路由表、网络接口、默认网关、网关ping、traceroute
"""
from typing import List, Optional, Sequence, Tuple

from .command_runner import CommandRunner
from ..models.results import ProbeResult
from ..utils.parsers import parse_default_route_line, parse_default_via

# (可执行文件, 参数列表)
Command = Tuple[str, List[str]]

ROUTING_TABLE_COMMANDS: List[Command] = [
    ("netstat", ["-nrv"]),
    ("ip", ["route"]),
    ("route", ["-n"]),
]

INTERFACE_COMMANDS: List[Command] = [
    ("ifconfig", ["-a"]),
    ("ip", ["addr", "show"]),
]

GATEWAY_NOT_DETECTED = "未检测到默认网关"


class NetworkTools:
    """
    网络诊断工具集

    每个探测按顺序尝试多个等价命令（不同系统/镜像上可用的工具不同），
    采用第一个执行成功且输出非空的结果；全部失败时返回最后一次尝试的结果，
    失败本身也是有效的诊断结论，不作为异常抛出
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        ping_count: int = 4,
        ping_deadline: int = 8
    ):
        """
        初始化网络工具

        Args:
            runner: 命令执行器
            ping_count: ping包数量
            ping_deadline: ping总等待时间（秒）
        """
        self.runner = runner or CommandRunner()
        self.ping_count = ping_count
        self.ping_deadline = ping_deadline

    async def _first_non_empty(self, commands: Sequence[Command]) -> ProbeResult:
        """
        依次尝试命令，返回第一个成功且有输出的结果

        Args:
            commands: 候选命令列表（至少一个）

        Returns:
            ProbeResult，全部失败时为最后一次尝试的结果
        """
        result = None
        for file, args in commands:
            result = await self.runner.run(file, args)
            if result.has_output():
                return result
        return result

    async def get_routing_table(self) -> ProbeResult:
        """获取路由表（netstat -nrv → ip route → route -n）"""
        return await self._first_non_empty(ROUTING_TABLE_COMMANDS)

    async def get_interfaces(self) -> ProbeResult:
        """获取网络接口列表（ifconfig -a → ip addr show）"""
        return await self._first_non_empty(INTERFACE_COMMANDS)

    async def get_default_gateway(self) -> Optional[str]:
        """
        获取默认网关地址

        先解析 ip route 的 "default via <地址>"，
        找不到时再解析 netstat -rn 中以 0.0.0.0/default 开头的IPv4路由行

        Returns:
            网关地址，无法检测时返回None
        """
        result = await self.runner.run("ip", ["route"])
        gateway = parse_default_via(result.stdout, result.stderr)
        if gateway:
            return gateway

        result = await self.runner.run("netstat", ["-rn"])
        return parse_default_route_line(result.stdout, result.stderr)

    async def ping_gateway(self, gateway: Optional[str]) -> ProbeResult:
        """
        ping默认网关

        未检测到网关时不执行任何命令，直接返回失败结果

        Args:
            gateway: 网关地址

        Returns:
            ProbeResult: ping结果（ICMP在部分托管环境中会被屏蔽）
        """
        if not gateway:
            return ProbeResult(ok=False, stdout="", stderr=GATEWAY_NOT_DETECTED, command="ping")

        count = str(self.ping_count)
        return await self.runner.run(
            "ping",
            ["-c", count, "-w", str(self.ping_deadline), gateway],
            label=f"ping -c {count} {gateway}"
        )

    async def traceroute(self, destination: str) -> ProbeResult:
        """
        跟踪到目标主机的路由

        traceroute 使用 -n（不做DNS解析）和 -q 1（每跳一次探测）加快速度；
        镜像中没有traceroute时回退到tracepath

        Args:
            destination: 目标主机（调用方已校验字符集）

        Returns:
            ProbeResult: 路由跟踪结果
        """
        result = await self.runner.run(
            "traceroute",
            ["-n", "-w", "2", "-q", "1", destination],
            label=f"traceroute -n {destination}"
        )
        if result.ok and (result.stdout.strip() or result.stderr.strip()):
            return result

        return await self.runner.run(
            "tracepath",
            ["-n", destination],
            label=f"tracepath -n {destination}"
        )
