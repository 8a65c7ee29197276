"""
FastAPI HTTP 服务 - 提供网络诊断接口

启动方式：
    uvicorn netprobe.api:app --host 0.0.0.0 --port 3000

    或: netprobe serve
"""
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from .agent import DiagnosticAggregator, InvalidTargetError, ReportGenerator
from .integrations import CommandRunner, HttpRelayClient, NetworkTools, load_config
from .integrations.http_relay import RelayError, build_relay_request
from .integrations.oracle_client import check_oracle_connection
from .utils.pages import render_port_form, render_replay_form

# 加载环境变量
load_dotenv()

config = load_config()

# 创建 FastAPI 应用
app = FastAPI(
    title="netprobe API",
    description="网络连通性诊断 API",
    version="1.0.0"
)

aggregator = DiagnosticAggregator(
    tools=NetworkTools(
        runner=CommandRunner(timeout=config.command_timeout),
        ping_count=config.ping_count,
        ping_deadline=config.ping_deadline
    ),
    port_timeout_ms=config.port_timeout_ms
)

relay_client = HttpRelayClient(
    timeout=config.relay_timeout,
    max_request_bytes=config.relay_max_request_bytes,
    max_response_bytes=config.relay_max_response_bytes,
    ssrf_guard=config.ssrf_guard
)

reporter = ReportGenerator()


@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    print(f"[API] netprobe 已启动 (ssrf_guard={config.ssrf_guard})")


# 请求模型
class CheckPortRequest(BaseModel):
    """端口诊断请求"""
    host: str = Field(..., description="目标主机IP或主机名，例如：8.8.8.8", min_length=1)
    port: int = Field(..., description="目标端口，例如：53")

    class Config:
        json_schema_extra = {
            "example": {
                "host": "8.8.8.8",
                "port": 53
            }
        }


@app.get("/", response_class=HTMLResponse)
async def index():
    """HTTP转发表单"""
    return render_replay_form()


@app.post("/test", response_class=HTMLResponse)
async def replay_request(
    remote_url: str = Form("", alias="RemoteUrl"),
    http_method: str = Form("GET", alias="HttpMethod"),
    headers_json: str = Form("", alias="Headers"),
    payload_type: str = Form("json", alias="PayloadType"),
    payload_text: str = Form("", alias="PayloadText")
):
    """
    转发HTTP请求并回显结果

    校验失败（URL为空/被拦截、JSON无法解析）时不发起任何外部调用
    """
    http_method = (http_method or "GET").upper()
    status_code: Optional[int] = None

    try:
        request = build_relay_request(
            url=remote_url,
            method=http_method,
            headers_json=headers_json,
            body_kind=payload_type,
            body_text=payload_text,
            ssrf_guard=config.ssrf_guard
        )
        response = await relay_client.send(request)
        status_code = response.status_code
        response_body = response.display_body()
    except RelayError as e:
        response_body = str(e)

    return render_replay_form(
        remote_url=remote_url,
        http_method=http_method,
        headers_json=headers_json,
        payload_type=payload_type,
        payload_text=payload_text,
        status_code=status_code,
        response_body=response_body
    )


@app.get("/port", response_class=HTMLResponse)
async def port_form():
    """端口检测表单"""
    return render_port_form()


@app.post("/check-port")
async def check_port_report(host: str = Form(""), port: str = Form("")):
    """
    端口检测 + 网络诊断

    主机或端口无效时返回纯文本提示，不执行任何探测
    """
    try:
        report = await aggregator.diagnose(host, port)
    except InvalidTargetError as e:
        return PlainTextResponse(str(e))

    print(f"[API] 诊断完成 {report.host}:{report.port} ({report.total_time:.1f}s)")
    return HTMLResponse(reporter.to_html(report))


@app.post("/api/v1/check-port")
async def check_port_json(request: CheckPortRequest):
    """
    端口检测 + 网络诊断（JSON）

    ### 请求示例：
    ```json
    {"host": "8.8.8.8", "port": 53}
    ```
    """
    try:
        report = await aggregator.diagnose(request.host, request.port)
    except InvalidTargetError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return report.to_dict()


@app.get("/test-oracle")
async def oracle_check():
    """测试Oracle数据库连接"""
    return JSONResponse(await check_oracle_connection(config))


@app.get("/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "oracle_configured": config.oracle_configured,
        "timestamp": datetime.now().isoformat()
    }
