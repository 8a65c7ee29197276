"""
Ping结果解析器

解析ping命令输出，提取丢包率、延迟等信息
"""
import re

from ...models.results import ProbeResult
from .base import PingResult

# Linux:   4 packets transmitted, 4 received, 0% packet loss, time 3004ms
# Linux:   4 packets transmitted, 0 received, +4 errors, 100% packet loss, time 3060ms
# macOS:   4 packets transmitted, 4 packets received, 0.0% packet loss
LOSS_PATTERN = re.compile(
    r"(\d+) packets transmitted, (\d+) (?:packets )?received,.*?([\d.]+)% packet loss"
)

# Linux:   rtt min/avg/max/mdev = 0.089/0.125/0.234/0.052 ms
# macOS:   round-trip min/avg/max/stddev = 1.016/1.306/1.585/0.204 ms
# busybox: round-trip min/avg/max = 0.084/0.101/0.129 ms
RTT_PATTERN = re.compile(
    r"(?:rtt|round-trip) min/avg/max(?:/\w+)? = ([\d.]+)/([\d.]+)/([\d.]+)"
)


def parse_ping_result(result: ProbeResult) -> PingResult:
    """
    解析ping命令输出

    Args:
        result: ping探测结果

    Returns:
        PingResult: 包含丢包率、RTT等统计信息；无法解析时视为100%丢包

    示例输入:
        PING 10.0.2.1 (10.0.2.1) 56(84) bytes of data.
        64 bytes from 10.0.2.1: icmp_seq=1 ttl=64 time=0.123 ms

        --- 10.0.2.1 ping statistics ---
        4 packets transmitted, 4 received, 0% packet loss, time 3001ms
        rtt min/avg/max/mdev = 0.089/0.125/0.234/0.052 ms
    """
    stdout = result.stdout

    loss_match = LOSS_PATTERN.search(stdout)
    if not loss_match:
        return PingResult(
            packets_transmitted=0,
            packets_received=0,
            packet_loss_percent=100.0,
            is_reachable=False
        )

    transmitted = int(loss_match.group(1))
    received = int(loss_match.group(2))
    loss_percent = float(loss_match.group(3))

    rtt_match = RTT_PATTERN.search(stdout)
    if rtt_match:
        rtt_min = float(rtt_match.group(1))
        rtt_avg = float(rtt_match.group(2))
        rtt_max = float(rtt_match.group(3))
    else:
        rtt_min = rtt_avg = rtt_max = None

    return PingResult(
        packets_transmitted=transmitted,
        packets_received=received,
        packet_loss_percent=loss_percent,
        rtt_min=rtt_min,
        rtt_avg=rtt_avg,
        rtt_max=rtt_max,
        is_reachable=(received > 0)
    )
