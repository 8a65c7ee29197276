"""
诊断报告数据模型
定义一次端口诊断请求的聚合结果
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .results import PortCheckResult, ProbeResult


@dataclass
class DiagnosticReport:
    """
    端口诊断报告

    每次请求新建，渲染后即丢弃。各探测结果独立降级，
    任意组合的失败都不会影响报告的生成
    """
    host: str                           # 目标主机
    port: int                           # 目标端口
    port_check: PortCheckResult         # TCP端口检测
    routing_table: ProbeResult          # 路由表
    interfaces: ProbeResult             # 网络接口
    gateway_ping: ProbeResult           # 网关ping
    traceroute: ProbeResult             # 到目标的路由跟踪
    gateway: Optional[str] = None       # 检测到的默认网关
    total_time: float = 0.0             # 总耗时（秒）
    created_at: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        failed = [result.command for _, result in self.sections() if not result.ok]
        return (f"报告[{self.host}:{self.port}] - {self.port_check.describe()}\n"
                f"失败的探测: {', '.join(failed) if failed else '无'}\n"
                f"总耗时: {self.total_time:.1f}s")

    def sections(self) -> List[Tuple[str, ProbeResult]]:
        """
        按固定展示顺序返回各探测结果

        Returns:
            (章节名称, 探测结果) 列表
        """
        gateway_title = f"网关 Ping ({self.gateway})" if self.gateway else "网关 Ping"
        return [
            ("路由表", self.routing_table),
            ("网络接口", self.interfaces),
            (gateway_title, self.gateway_ping),
            ("Traceroute", self.traceroute),
        ]

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "host": self.host,
            "port": self.port,
            "port_check": self.port_check.to_dict(),
            "routing_table": self.routing_table.to_dict(),
            "interfaces": self.interfaces.to_dict(),
            "gateway": self.gateway,
            "gateway_ping": self.gateway_ping.to_dict(),
            "traceroute": self.traceroute.to_dict(),
            "total_time": self.total_time,
            "created_at": self.created_at.isoformat()
        }
