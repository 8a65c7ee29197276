"""
Traceroute输出解析器

解析 traceroute -n / tracepath -n 输出，统计跳数和断点位置
"""
import re
from typing import Dict, Optional

from ...models.results import ProbeResult
from .base import TracerouteHop, TracerouteResult

# traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
TARGET_PATTERN = re.compile(r"^traceroute6? to \S+ \(([^)]+)\)", re.MULTILINE)

# traceroute: " 1  172.17.0.1  0.061 ms"    " 2  *"
# tracepath:  " 1:  172.17.0.1   0.074ms"   " 2:  no reply"   " 1?: [LOCALHOST] pmtu 1500"
HOP_PATTERN = re.compile(r"^\s*(\d+)\??:?\s+(\S+)(.*)$")
RTT_PATTERN = re.compile(r"([\d.]+)\s*ms")
ADDRESS_PATTERN = re.compile(r"[0-9a-fA-F.:]*\d[0-9a-fA-F.:]*")


def parse_traceroute_output(result: ProbeResult, target: Optional[str] = None) -> TracerouteResult:
    """
    解析traceroute/tracepath输出

    Args:
        result: traceroute探测结果
        target: 目标地址（输出中没有头部行时使用，例如tracepath）

    Returns:
        TracerouteResult: 包含所有跳点和分析结果

    解析逻辑:
        1. 提取目标IP（没有头部行时使用传入的target）
        2. 逐行解析每一跳，同一跳出现多行时保留第一个可达的记录
        3. 识别第一个超时的hop
        4. 记录最后一个可达的hop
    """
    stdout = result.stdout

    target_match = TARGET_PATTERN.search(stdout)
    target_ip = target_match.group(1) if target_match else (target or "")

    hops_by_number: Dict[int, TracerouteHop] = {}
    for line in stdout.split('\n'):
        hop_match = HOP_PATTERN.match(line)
        if not hop_match:
            continue

        hop_number = int(hop_match.group(1))
        address = hop_match.group(2)
        rest = hop_match.group(3)

        if address.startswith('['):
            # tracepath 的 [LOCALHOST] pmtu 行
            continue

        if address in ('*', 'no') or not ADDRESS_PATTERN.fullmatch(address):
            hop = TracerouteHop(hop_number=hop_number, ip_address=None, rtt_ms=None, is_timeout=True)
        else:
            rtt_match = RTT_PATTERN.search(rest)
            hop = TracerouteHop(
                hop_number=hop_number,
                ip_address=address,
                rtt_ms=float(rtt_match.group(1)) if rtt_match else None,
                is_timeout=False
            )

        previous = hops_by_number.get(hop_number)
        if previous is None or (previous.is_timeout and not hop.is_timeout):
            hops_by_number[hop_number] = hop

    hops = [hops_by_number[number] for number in sorted(hops_by_number)]

    last_reachable_hop: Optional[TracerouteHop] = None
    first_timeout_hop: Optional[int] = None
    for hop in hops:
        if hop.is_timeout:
            if first_timeout_hop is None:
                first_timeout_hop = hop.hop_number
        else:
            last_reachable_hop = hop

    is_complete = bool(
        last_reachable_hop and target_ip and last_reachable_hop.ip_address == target_ip
    )

    return TracerouteResult(
        target_ip=target_ip,
        hops=hops,
        last_reachable_hop=last_reachable_hop,
        first_timeout_hop=first_timeout_hop,
        is_complete=is_complete
    )
