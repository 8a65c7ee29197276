"""
外部集成包

提供本地命令执行、网络探测、端口检测、HTTP转发和配置加载
"""
from .command_runner import CommandRunner
from .config_loader import AppConfig, load_config
from .http_relay import HttpRelayClient, RelayError, RelayValidationError, UnsafeTargetError
from .network_tools import NetworkTools
from .port_checker import check_port

__all__ = [
    "AppConfig",
    "load_config",
    "CommandRunner",
    "NetworkTools",
    "check_port",
    "HttpRelayClient",
    "RelayError",
    "RelayValidationError",
    "UnsafeTargetError",
]
