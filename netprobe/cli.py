"""
CLI命令行入口

使用Typer框架提供命令行接口
"""
import asyncio
import json

import typer
from dotenv import load_dotenv
from rich.console import Console

from .agent import DiagnosticAggregator, InvalidTargetError, ReportGenerator
from .integrations import AppConfig, CommandRunner, HttpRelayClient, NetworkTools, RelayError, load_config
from .integrations.http_relay import build_relay_request
from .utils.output_formatter import ReportFormatter

# 加载环境变量
load_dotenv()

app = typer.Typer(
    name="netprobe",
    help="网络连通性诊断工具",
    add_completion=False
)
console = Console()


def build_aggregator(config: AppConfig) -> DiagnosticAggregator:
    """按配置构造诊断聚合器"""
    return DiagnosticAggregator(
        tools=NetworkTools(
            runner=CommandRunner(timeout=config.command_timeout),
            ping_count=config.ping_count,
            ping_deadline=config.ping_deadline
        ),
        port_timeout_ms=config.port_timeout_ms
    )


def build_relay_client(config: AppConfig) -> HttpRelayClient:
    """按配置构造HTTP转发客户端"""
    return HttpRelayClient(
        timeout=config.relay_timeout,
        max_request_bytes=config.relay_max_request_bytes,
        max_response_bytes=config.relay_max_response_bytes,
        ssrf_guard=config.ssrf_guard
    )


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="监听地址"),
    port: int = typer.Option(None, "--port", "-p", help="监听端口（默认读取PORT环境变量，否则3000）")
):
    """启动HTTP服务"""
    import uvicorn

    config = load_config()
    listen_port = port or config.port
    console.print(f"[bold cyan]netprobe[/bold cyan] 服务启动于 http://localhost:{listen_port}")
    uvicorn.run("netprobe.api:app", host=host, port=listen_port)


@app.command("check-port")
def check_port_command(
    host: str = typer.Argument(..., help="目标主机IP或主机名，例如: 8.8.8.8"),
    port: str = typer.Argument(..., help="目标端口，例如: 53"),
    as_json: bool = typer.Option(False, "--json", help="以JSON格式输出报告"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="显示完整的命令输出")
):
    """
    检测端口可达性并收集网络诊断信息

    示例:
        netprobe check-port 8.8.8.8 53
    """
    aggregator = build_aggregator(load_config())

    try:
        report = asyncio.run(aggregator.diagnose(host, port))
    except InvalidTargetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
        return

    ReportFormatter(verbose=verbose, console=console).print_report(report)
    console.print(ReportGenerator().generate_summary(report), markup=False)


@app.command("replay")
def replay_command(
    url: str = typer.Argument(..., help="目标URL"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP方法"),
    headers: str = typer.Option("", "--headers", "-H", help='JSON格式的请求头，例如: {"Accept": "application/json"}'),
    payload_type: str = typer.Option("json", "--payload-type", help="请求体类型: json | xml"),
    payload: str = typer.Option("", "--payload", "-d", help="请求体")
):
    """转发一次HTTP请求并显示原始响应"""
    config = load_config()
    client = build_relay_client(config)

    try:
        request = build_relay_request(
            url=url,
            method=method,
            headers_json=headers,
            body_kind=payload_type,
            body_text=payload,
            ssrf_guard=config.ssrf_guard
        )
        response = asyncio.run(client.send(request))
    except RelayError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    if response.is_error:
        console.print(f"[red]{response.error_message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]Status Code:[/bold] {response.status_code}")
    console.print(response.body_text, markup=False)


if __name__ == "__main__":
    app()
