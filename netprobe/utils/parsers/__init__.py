"""
命令输出解析器包

提供网关、ping和traceroute解析器的导入
"""
from .base import PingResult, TracerouteHop, TracerouteResult
from .gateway_parser import parse_default_route_line, parse_default_via
from .ping_parser import parse_ping_result
from .traceroute_parser import parse_traceroute_output

__all__ = [
    # 数据结构
    "PingResult",
    "TracerouteHop",
    "TracerouteResult",
    # 解析器函数
    "parse_default_via",
    "parse_default_route_line",
    "parse_ping_result",
    "parse_traceroute_output",
]
