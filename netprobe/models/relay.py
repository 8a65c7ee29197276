"""
HTTP请求转发相关数据模型
"""
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class RelayRequest:
    """
    待转发的HTTP请求

    body_kind 为 "json" 或 "xml"，仅在 POST/PUT/PATCH 时发送请求体
    """
    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body_kind: str = "json"
    body_text: str = ""


@dataclass
class RelayResponse:
    """
    转发结果

    收到任意HTTP响应（包括4xx/5xx）时填充 status_code 和 body_text；
    网络或配置错误时只填充 error_message
    """
    status_code: Optional[int] = None
    body_text: str = ""
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None

    def display_body(self) -> str:
        """页面上展示的响应内容"""
        return self.error_message if self.is_error else self.body_text
