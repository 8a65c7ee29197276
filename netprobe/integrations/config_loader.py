"""
配置加载器

从可选的YAML配置文件和环境变量加载运行配置
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass
class AppConfig:
    """运行配置"""
    port: int = 3000                            # 监听端口
    command_timeout: float = 8.0                # 诊断命令超时（秒）
    port_timeout_ms: int = 3000                 # TCP连接超时（毫秒）
    ping_count: int = 4                         # ping包数量
    ping_deadline: int = 8                      # ping总等待时间（秒）
    relay_timeout: float = 10.0                 # HTTP转发超时（秒）
    relay_max_request_bytes: int = 1 * 1024 * 1024
    relay_max_response_bytes: int = 2 * 1024 * 1024
    ssrf_guard: bool = True                     # 是否拒绝内网/回环目标
    oracle_user: Optional[str] = None
    oracle_password: Optional[str] = None
    oracle_connect_string: Optional[str] = None

    @property
    def oracle_configured(self) -> bool:
        return bool(self.oracle_user and self.oracle_password and self.oracle_connect_string)


# 环境变量 -> 配置字段
ENV_OVERRIDES = {
    "PORT": "port",
    "ORACLE_USER": "oracle_user",
    "ORACLE_PASSWORD": "oracle_password",
    "ORACLE_CONNECTSTRING": "oracle_connect_string",
    "NETPROBE_SSRF_GUARD": "ssrf_guard",
}


def _expand_env(value: Any) -> Any:
    """替换 ${VAR} 形式的环境变量引用"""
    if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
        return os.getenv(value[2:-1], '')
    return value


def _coerce(name: str, value: Any) -> Any:
    """按字段默认值的类型转换配置值"""
    default = AppConfig.__dataclass_fields__[name].default
    if value is None or value == '':
        return default
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() not in ('0', 'false', 'no', 'off')
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    加载运行配置

    优先级：环境变量 > YAML配置文件 > 默认值

    Args:
        config_path: 配置文件路径，如果为None则依次尝试 NETPROBE_CONFIG
            环境变量和默认路径 config/netprobe.yaml（不存在时忽略）

    Returns:
        AppConfig实例

    Raises:
        FileNotFoundError: 显式指定的配置文件不存在
        yaml.YAMLError: 配置文件格式错误
        ValueError: 配置值无法转换为对应类型
    """
    explicit = config_path or os.getenv("NETPROBE_CONFIG")
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise FileNotFoundError(f"配置文件不存在: {path}")
    else:
        project_root = Path(__file__).parent.parent.parent
        path = project_root / "config" / "netprobe.yaml"

    values: Dict[str, Any] = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(AppConfig)}
        for key, value in config_data.items():
            if key in known:
                values[key] = _coerce(key, _expand_env(value))

    for env_var, name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_var)
        if env_value:
            values[name] = _coerce(name, env_value)

    return AppConfig(**values)
