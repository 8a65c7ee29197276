"""
数据模型包
提供所有核心数据结构的导入
"""
from .relay import RelayRequest, RelayResponse
from .report import DiagnosticReport
from .results import PortCheckResult, ProbeResult

__all__ = [
    # 探测结果
    "ProbeResult",
    "PortCheckResult",
    # 报告
    "DiagnosticReport",
    # HTTP转发
    "RelayRequest",
    "RelayResponse",
]
