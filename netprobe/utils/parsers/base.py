"""
解析器通用数据结构

定义所有解析器共用的数据结构
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PingResult:
    """Ping命令结果"""
    packets_transmitted: int
    packets_received: int
    packet_loss_percent: float
    rtt_min: Optional[float] = None    # ms
    rtt_avg: Optional[float] = None    # ms
    rtt_max: Optional[float] = None    # ms
    is_reachable: bool = False


@dataclass
class TracerouteHop:
    """Traceroute单个跳点"""
    hop_number: int
    ip_address: Optional[str]          # None表示超时（*）
    rtt_ms: Optional[float]            # 第一次RTT
    is_timeout: bool


@dataclass
class TracerouteResult:
    """Traceroute完整结果"""
    target_ip: str
    hops: List[TracerouteHop] = field(default_factory=list)
    last_reachable_hop: Optional[TracerouteHop] = None
    first_timeout_hop: Optional[int] = None  # 第一个超时的hop编号
    is_complete: bool = False          # 是否到达目标
