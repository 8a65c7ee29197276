"""
HTML页面

HTTP转发表单和端口检测表单
"""
from html import escape
from typing import Optional

METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _selected(current: str, value: str) -> str:
    return " selected" if current == value else ""


def render_replay_form(
    remote_url: str = "",
    http_method: str = "GET",
    headers_json: str = "",
    payload_type: str = "json",
    payload_text: str = "",
    status_code: Optional[int] = None,
    response_body: str = ""
) -> str:
    """
    渲染HTTP转发表单，回填上一次的输入和结果

    Returns:
        完整HTML页面
    """
    method_options = "".join(
        f'<option value="{m}"{_selected(http_method, m)}>{m}</option>' for m in METHODS
    )

    result = ""
    if status_code is not None or response_body:
        status_text = status_code if status_code is not None else "-"
        result = (f"<h2>结果</h2>\n"
                  f"<p>Status Code: <strong>{status_text}</strong></p>\n"
                  f"<pre>{escape(response_body or '', quote=False)}</pre>\n")

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>HTTP 请求测试</title></head>
<body>
<h1>HTTP 请求测试</h1>
<form action="/test" method="post">
  <label for="RemoteUrl">Remote URL:</label>
  <input type="text" name="RemoteUrl" id="RemoteUrl" size="80" value="{escape(remote_url)}" required />
  <br/>
  <label for="HttpMethod">Method:</label>
  <select name="HttpMethod" id="HttpMethod">{method_options}</select>
  <br/>
  <label for="Headers">Headers (JSON):</label><br/>
  <textarea name="Headers" id="Headers" rows="4" cols="80">{escape(headers_json, quote=False)}</textarea>
  <br/>
  <label for="PayloadType">Payload Type:</label>
  <select name="PayloadType" id="PayloadType">
    <option value="json"{_selected(payload_type, "json")}>JSON</option>
    <option value="xml"{_selected(payload_type, "xml")}>XML</option>
  </select>
  <br/>
  <label for="PayloadText">Payload:</label><br/>
  <textarea name="PayloadText" id="PayloadText" rows="10" cols="80">{escape(payload_text, quote=False)}</textarea>
  <br/><br/>
  <button type="submit">发送</button>
</form>
{result}</body>
</html>
"""


def render_port_form() -> str:
    """渲染端口检测表单"""
    return """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>IP/端口可达性测试</title></head>
<body>
<h1>IP/端口可达性测试</h1>
<form action="/check-port" method="post">
  <label for="host">主机/IP:</label>
  <input type="text" name="host" id="host" placeholder="例如 8.8.8.8" required />
  <br/>
  <label for="port">端口:</label>
  <input type="number" name="port" id="port" placeholder="例如 53" required />
  <br/><br/>
  <button type="submit">检测</button>
</form>
</body>
</html>
"""
