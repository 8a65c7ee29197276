"""
Traceroute解析器单元测试
"""
from netprobe.models.results import ProbeResult
from netprobe.utils.parsers.traceroute_parser import parse_traceroute_output


def _result(stdout: str, command: str = "traceroute -n 8.8.8.8") -> ProbeResult:
    return ProbeResult(ok=True, stdout=stdout, stderr="", command=command)


class TestParseTracerouteOutput:
    """Traceroute输出解析测试"""

    def test_traceroute_complete(self):
        """测试Traceroute完整到达目标的场景"""
        result = _result("""traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
 1  172.17.0.1  0.061 ms
 2  10.10.1.1  1.234 ms
 3  8.8.8.8  9.876 ms""")

        tr_result = parse_traceroute_output(result)

        assert tr_result.target_ip == "8.8.8.8"
        assert tr_result.is_complete is True
        assert len(tr_result.hops) == 3
        assert tr_result.first_timeout_hop is None
        assert tr_result.last_reachable_hop.ip_address == "8.8.8.8"
        assert tr_result.last_reachable_hop.rtt_ms == 9.876

    def test_traceroute_broken_path(self):
        """测试Traceroute中途断开的场景（-q 1 每跳只有一个 *）"""
        result = _result("""traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
 1  172.17.0.1  0.061 ms
 2  10.10.1.1  1.234 ms
 3  *
 4  *""")

        tr_result = parse_traceroute_output(result)

        assert tr_result.is_complete is False
        assert tr_result.first_timeout_hop == 3
        assert tr_result.last_reachable_hop.hop_number == 2
        assert tr_result.last_reachable_hop.ip_address == "10.10.1.1"
        assert len(tr_result.hops) == 4

    def test_tracepath_output(self):
        """测试tracepath输出（没有头部行，同一跳可能出现多行）"""
        result = _result(""" 1?: [LOCALHOST]                      pmtu 1500
 1:  172.17.0.1                                            0.074ms
 1:  172.17.0.1                                            0.046ms
 2:  no reply
 3:  8.8.8.8                                              12.512ms reached
     Resume: pmtu 1500 hops 3 back 3""", command="tracepath -n 8.8.8.8")

        tr_result = parse_traceroute_output(result, target="8.8.8.8")

        assert tr_result.target_ip == "8.8.8.8"
        assert [hop.hop_number for hop in tr_result.hops] == [1, 2, 3]
        assert tr_result.hops[0].rtt_ms == 0.074
        assert tr_result.hops[1].is_timeout is True
        assert tr_result.first_timeout_hop == 2
        assert tr_result.is_complete is True

    def test_empty_output(self):
        """测试命令失败无输出"""
        result = ProbeResult(ok=False, stdout="", stderr="命令执行超时（8秒）", command="tracepath -n 8.8.8.8")

        tr_result = parse_traceroute_output(result, target="8.8.8.8")

        assert tr_result.hops == []
        assert tr_result.last_reachable_hop is None
        assert tr_result.is_complete is False
