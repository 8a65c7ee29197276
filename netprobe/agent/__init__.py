"""
诊断核心模块

包含诊断聚合器和报告生成器
"""
from .aggregator import DiagnosticAggregator, InvalidTargetError, validate_target
from .reporter import ReportGenerator

__all__ = [
    "DiagnosticAggregator",
    "InvalidTargetError",
    "validate_target",
    "ReportGenerator",
]
