"""
报告生成器

将诊断报告渲染为HTML页面或终端摘要
"""
from html import escape
from typing import List, Optional

from ..models.report import DiagnosticReport
from ..models.results import ProbeResult
from ..utils.parsers import parse_ping_result, parse_traceroute_output

EMPTY_MARKER = "(空)"

HOSTING_NOTE = (
    "注意：在 App Service/ASE 等托管环境中，部分命令可能不可用或ICMP被屏蔽；"
    "此时即使应用层连接正常，也可能看到错误。"
)


def esc(text: Optional[str]) -> str:
    """<pre> 块的HTML转义"""
    return escape(text or "", quote=False)


class ReportGenerator:
    """
    报告生成器

    每个探测独立渲染为一个章节：标题包含实际执行的命令，
    输出为空时显示占位符，stderr非空时单独显示
    """

    def ping_summary(self, report: DiagnosticReport) -> Optional[str]:
        """网关ping统计摘要，无法解析时返回None"""
        if not report.gateway:
            return None
        ping = parse_ping_result(report.gateway_ping)
        if ping.packets_transmitted == 0:
            return None
        summary = (f"网关 {report.gateway}: 发送 {ping.packets_transmitted}，"
                   f"接收 {ping.packets_received}，丢包 {ping.packet_loss_percent:g}%")
        if ping.rtt_avg is not None:
            summary += f"，平均延迟 {ping.rtt_avg} ms"
        return summary

    def traceroute_summary(self, report: DiagnosticReport) -> Optional[str]:
        """traceroute跳点摘要，无法解析时返回None"""
        trace = parse_traceroute_output(report.traceroute, target=report.host)
        if not trace.hops:
            return None
        summary = f"Traceroute: 共 {len(trace.hops)} 跳"
        if trace.is_complete:
            summary += "，已到达目标"
        elif trace.last_reachable_hop:
            summary += (f"，最后可达第 {trace.last_reachable_hop.hop_number} 跳 "
                        f"({trace.last_reachable_hop.ip_address})")
        if trace.first_timeout_hop is not None:
            summary += f"，第 {trace.first_timeout_hop} 跳开始出现超时"
        return summary

    def _summaries(self, report: DiagnosticReport) -> List[str]:
        return [s for s in (self.ping_summary(report), self.traceroute_summary(report)) if s]

    @staticmethod
    def _render_section(title: str, result: ProbeResult) -> str:
        html = (f"<h2>{esc(title)} ({esc(result.command)})</h2>\n"
                f"<pre>{esc(result.stdout) or EMPTY_MARKER}</pre>\n")
        if result.stderr:
            html += f"<h3>stderr</h3>\n<pre>{esc(result.stderr)}</pre>\n"
        return html

    def to_html(self, report: DiagnosticReport) -> str:
        """
        生成HTML报告

        Args:
            report: 诊断报告

        Returns:
            HTML片段
        """
        html = "<h1>端口检测结果</h1>\n"
        html += f"<p>{esc(report.port_check.describe())}</p>\n"

        summaries = self._summaries(report)
        if summaries:
            html += "<ul>\n"
            for summary in summaries:
                html += f"<li>{esc(summary)}</li>\n"
            html += "</ul>\n"

        for title, result in report.sections():
            html += self._render_section(title, result)

        html += f'<p style="margin-top:16px;color:#666;font-size:0.9em">{esc(HOSTING_NOTE)}</p>\n'
        return html

    def generate_summary(self, report: DiagnosticReport) -> str:
        """
        生成简要摘要（用于终端输出）

        Args:
            report: 诊断报告

        Returns:
            摘要文本
        """
        summary = f"""
{'='*60}
端口诊断报告 - {report.host}:{report.port}
{'='*60}

{report.port_check.describe()}
默认网关: {report.gateway or '未检测到'}
总耗时: {report.total_time:.1f}秒

探测结果:
"""
        for title, result in report.sections():
            status_icon = "[OK]" if result.ok else "[FAIL]"
            summary += f"  {status_icon} {title}: {result.command}\n"

        for line in self._summaries(report):
            summary += f"\n{line}"

        summary += "\n" + "=" * 60
        return summary
