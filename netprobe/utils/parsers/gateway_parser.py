"""
默认网关解析器

从路由命令输出中提取默认网关地址。匹配失败返回None，不抛出异常
"""
import re
from typing import Optional

# ip route: "default via 192.168.1.1 dev eth0 proto dhcp metric 100"
DEFAULT_VIA_PATTERN = re.compile(r"default\s+via\s+([0-9a-fA-F.:]+)")

# netstat -rn (Linux): "0.0.0.0         192.168.1.1     0.0.0.0         UG ..."
# netstat -rn (BSD/macOS): "default            192.168.1.1        UGScg          en0"
DEFAULT_ROUTE_LINE_PATTERN = re.compile(
    r"^(?:0\.0\.0\.0|default)\s+([0-9]+\.[0-9]+\.[0-9]+\.[0-9]+)",
    re.MULTILINE
)


def _combine(stdout: str, stderr: str) -> str:
    return (stdout or "") + "\n" + (stderr or "")


def parse_default_via(stdout: str, stderr: str = "") -> Optional[str]:
    """
    解析 ip route 输出中的默认网关

    Args:
        stdout: 命令标准输出
        stderr: 命令标准错误输出（一并参与匹配）

    Returns:
        网关地址（IPv4或IPv6），未找到返回None

    示例输入:
        default via 172.17.0.1 dev eth0
        172.17.0.0/16 dev eth0 proto kernel scope link src 172.17.0.2
    """
    match = DEFAULT_VIA_PATTERN.search(_combine(stdout, stderr))
    return match.group(1) if match else None


def parse_default_route_line(stdout: str, stderr: str = "") -> Optional[str]:
    """
    解析 netstat -rn 输出中以 0.0.0.0 或 default 开头的路由行

    只匹配IPv4网关；链路本地条目（如 "default link#4"）不会匹配

    Args:
        stdout: 命令标准输出
        stderr: 命令标准错误输出（一并参与匹配）

    Returns:
        IPv4网关地址，未找到返回None
    """
    match = DEFAULT_ROUTE_LINE_PATTERN.search(_combine(stdout, stderr))
    return match.group(1) if match else None
