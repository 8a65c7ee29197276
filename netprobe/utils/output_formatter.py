"""
诊断报告终端格式化器

使用rich在终端中展示各探测结果，支持verbose和默认两种模式
"""
from rich.console import Console
from rich.panel import Panel

from ..models.report import DiagnosticReport
from ..models.results import ProbeResult


class ReportFormatter:
    """诊断报告终端格式化器"""

    def __init__(self, verbose: bool = False, console: Console = None):
        """
        初始化格式化器

        Args:
            verbose: 是否显示完整输出
            console: rich Console（默认新建）
        """
        self.console = console or Console(emoji=False, legacy_windows=False)
        self.verbose = verbose

    def print_report(self, report: DiagnosticReport):
        """打印完整报告"""
        port_check = report.port_check
        color = "green" if port_check.reachable else "red"
        self.console.print(f"\n[bold {color}]{port_check.describe()}[/bold {color}]")

        for title, result in report.sections():
            self.print_probe(title, result)

        self.console.print(f"\n[dim]总耗时: {report.total_time:.1f}秒[/dim]")

    def print_probe(self, title: str, result: ProbeResult):
        """打印单个探测结果"""
        status_color = "green" if result.ok else "red"
        status_text = "成功" if result.ok else "失败"
        self.console.print(
            f"\n[bold cyan]{title}[/bold cyan] [dim]({result.command})[/dim] "
            f"[{status_color}]{status_text}[/{status_color}]"
        )

        stdout = result.stdout.strip()
        if self.verbose:
            self.console.print(Panel(stdout or "(空)", border_style="green", title="stdout"))
        elif stdout:
            display_text = stdout[:300]
            if len(stdout) > 300:
                display_text += f"\n... (还有{len(stdout)-300}字符，使用--verbose查看完整输出)"
            self.console.print(display_text, markup=False)

        # 如果有错误，总是显示
        if result.stderr:
            self.console.print(Panel(result.stderr.strip(), border_style="red", title="stderr"))
