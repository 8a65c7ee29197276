"""
HTTP请求转发客户端

将用户构造的HTTP请求转发到远程地址，返回原始状态码和响应内容
"""
import ipaddress
import json
import re
import socket
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from ..models.relay import RelayRequest, RelayResponse


# 自定义异常类
class RelayError(Exception):
    """HTTP转发错误基类"""
    pass


class RelayValidationError(RelayError):
    """请求参数校验失败（不会发起任何外部调用）"""
    pass


class UnsafeTargetError(RelayValidationError):
    """目标地址指向回环、链路本地或内网"""
    pass


# 不允许由调用方透传的逐跳/由客户端计算的请求头
FORBIDDEN_HEADERS = {"host", "connection", "transfer-encoding", "content-length"}

BODY_METHODS = {"POST", "PUT", "PATCH"}

PRIVATE_HOST_PATTERNS = [
    re.compile(r"^127\."),                          # 回环
    re.compile(r"^169\.254\."),                     # 链路本地
    re.compile(r"^10\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^172\.(1[6-9]|2\d|3[0-1])\."),
]

# 纯数字、十六进制或八进制写法的IPv4主机（如 0、2130706433、0x7f.0.0.1）
NUMERIC_HOST_PATTERN = re.compile(r"^[0-9][0-9a-fx.]*$")


def _normalize_host(host: str) -> Optional[str]:
    """
    规范化主机名，数字形式的IPv4转换为点分十进制

    Returns:
        规范化后的主机名；数字形式但无法解析时返回None
    """
    host = host.lower().rstrip(".")
    if NUMERIC_HOST_PATTERN.match(host):
        try:
            return socket.inet_ntoa(socket.inet_aton(host))
        except OSError:
            return None
    return host


def is_safe_url(url: str) -> bool:
    """
    检查URL是否允许作为转发目标

    只允许 http/https；拒绝 localhost、回环、链路本地和RFC1918内网地址。
    按主机名模式判断，不做DNS解析；数字形式的IPv4先转换为点分十进制再判断

    Args:
        url: 目标URL

    Returns:
        允许转发返回True
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if parts.scheme not in ("http", "https"):
        return False

    host = _normalize_host(parts.hostname or "")
    if not host:
        return False
    if host == "localhost" or host.endswith(".localhost"):
        return False
    if any(pattern.match(host) for pattern in PRIVATE_HOST_PATTERNS):
        return False

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return True

    return not (address.is_loopback or address.is_link_local
                or address.is_private or address.is_unspecified)


def sanitize_forward_headers(headers: Dict[str, Any]) -> Dict[str, str]:
    """
    过滤不可转发的请求头

    Args:
        headers: 调用方提供的请求头

    Returns:
        过滤后的请求头（值统一转为字符串）
    """
    return {
        str(name): str(value)
        for name, value in headers.items()
        if str(name).lower() not in FORBIDDEN_HEADERS
    }


def build_relay_request(
    url: str,
    method: str = "GET",
    headers_json: str = "",
    body_kind: str = "json",
    body_text: str = "",
    ssrf_guard: bool = True
) -> RelayRequest:
    """
    校验表单输入并构造RelayRequest

    Args:
        url: 目标URL
        method: HTTP方法
        headers_json: JSON对象格式的请求头文本
        body_kind: 请求体类型 json | xml
        body_text: 请求体文本
        ssrf_guard: 是否启用内网地址拦截

    Returns:
        RelayRequest

    Raises:
        RelayValidationError: URL为空、请求头/请求体JSON无法解析
        UnsafeTargetError: 目标地址被拦截
    """
    url = (url or "").strip()
    if not url:
        raise RelayValidationError("RemoteUrl 为空。请输入有效的 http/https URL。")
    if ssrf_guard and not is_safe_url(url):
        raise UnsafeTargetError(
            "RemoteUrl 不允许访问。请输入有效的 http/https URL（不允许内网/回环地址）。"
        )

    headers: Dict[str, str] = {}
    if headers_json and headers_json.strip():
        try:
            parsed = json.loads(headers_json)
        except json.JSONDecodeError as e:
            raise RelayValidationError(f"解析JSON请求头出错: {e}")
        if not isinstance(parsed, dict):
            raise RelayValidationError("解析JSON请求头出错: 请求头必须是JSON对象")
        headers = sanitize_forward_headers(parsed)

    method = (method or "GET").upper()
    body_kind = (body_kind or "json").lower()

    if method in BODY_METHODS and body_kind == "json" and body_text.strip():
        try:
            json.loads(body_text)
        except json.JSONDecodeError as e:
            raise RelayValidationError(f"JSON请求体无效: {e}")

    return RelayRequest(
        url=url,
        method=method,
        headers=headers,
        body_kind=body_kind,
        body_text=body_text or ""
    )


class HttpRelayClient:
    """
    HTTP转发客户端

    - 任何HTTP状态码都视为有效结果，不抛出异常
    - 网络/配置错误转换为错误信息
    - 请求体和响应体都有大小上限
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_request_bytes: int = 1 * 1024 * 1024,
        max_response_bytes: int = 2 * 1024 * 1024,
        ssrf_guard: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        初始化转发客户端

        Args:
            timeout: 请求超时（秒）
            max_request_bytes: 请求体上限（字节）
            max_response_bytes: 响应体上限（字节）
            ssrf_guard: 是否对重定向目标再次做内网地址拦截
            transport: 自定义传输层（测试用）
        """
        self.timeout = timeout
        self.max_request_bytes = max_request_bytes
        self.max_response_bytes = max_response_bytes
        self.ssrf_guard = ssrf_guard
        self.transport = transport

    @staticmethod
    def _set_content_type(headers: Dict[str, str], content_type: str):
        """设置Content-Type，替换调用方提供的同名请求头（大小写不敏感）"""
        for name in [name for name in headers if name.lower() == "content-type"]:
            del headers[name]
        headers["Content-Type"] = content_type

    def _encode_body(self, request: RelayRequest) -> Optional[bytes]:
        """按类型编码请求体，并设置Content-Type"""
        if request.method not in BODY_METHODS:
            return None

        if request.body_kind == "json":
            data = json.loads(request.body_text) if request.body_text.strip() else {}
            self._set_content_type(request.headers, "application/json")
            content = json.dumps(data, ensure_ascii=False).encode("utf-8")
        elif request.body_kind == "xml":
            self._set_content_type(request.headers, "application/xml")
            content = request.body_text.encode("utf-8")
        else:
            return None

        if len(content) > self.max_request_bytes:
            raise RelayValidationError(
                f"请求体超过上限（{self.max_request_bytes} 字节）"
            )
        return content

    async def _check_target(self, request: httpx.Request):
        """发送前检查目标地址，跟随重定向时每一跳都会经过这里"""
        if self.ssrf_guard and not is_safe_url(str(request.url)):
            raise UnsafeTargetError(f"目标地址不允许访问: {request.url.host}")

    def _format_body(self, response: httpx.Response, raw: bytes) -> str:
        """JSON响应格式化输出，其余按文本返回"""
        text = raw.decode(response.encoding or "utf-8", errors="replace")
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return json.dumps(json.loads(text), ensure_ascii=False, indent=2)
            except json.JSONDecodeError:
                return text
        return text

    async def send(self, request: RelayRequest) -> RelayResponse:
        """
        发送请求

        Args:
            request: 已校验的转发请求

        Returns:
            RelayResponse: 状态码+响应内容，或错误信息

        Raises:
            RelayValidationError: 请求体超过上限
        """
        content = self._encode_body(request)

        print(f"[HttpRelay] Remote URL: {request.url}")
        print(f"[HttpRelay] Http Method: {request.method}")
        print(f"[HttpRelay] Payload Type: {request.body_kind}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
                event_hooks={"request": [self._check_target]}
            ) as client:
                async with client.stream(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=content
                ) as response:
                    raw = bytearray()
                    async for chunk in response.aiter_bytes():
                        raw.extend(chunk)
                        if len(raw) > self.max_response_bytes:
                            message = f"响应体超过上限（{self.max_response_bytes} 字节）"
                            print(f"[HttpRelay] {message}")
                            return RelayResponse(error_message=message)

                    print(f"[HttpRelay] Status Code: {response.status_code}")
                    return RelayResponse(
                        status_code=response.status_code,
                        body_text=self._format_body(response, bytes(raw))
                    )
        except UnsafeTargetError as e:
            print(f"[HttpRelay] 重定向被拦截: {e}")
            return RelayResponse(error_message=str(e))
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            message = str(e) or e.__class__.__name__
            print(f"[HttpRelay] Network/Config Error: {message}")
            return RelayResponse(error_message=message)
