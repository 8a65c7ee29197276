"""
TCP端口检测

通过原始TCP连接判断主机端口是否可达
"""
import asyncio

DEFAULT_TIMEOUT_MS = 3000

# 关闭连接时允许的额外等待时间（秒）
CLOSE_GRACE = 0.5


async def check_port(host: str, port: int, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
    """
    检测TCP端口是否可达

    超时和连接错误（拒绝、不可达、DNS失败）都返回False，不做区分。
    所有路径都会关闭socket

    Args:
        host: 目标主机
        port: 目标端口
        timeout_ms: 连接超时（毫秒）

    Returns:
        连接在超时前建立成功返回True，否则返回False
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout_ms / 1000
        )
    except (asyncio.TimeoutError, OSError):
        return False

    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), CLOSE_GRACE)
    except (asyncio.TimeoutError, OSError):
        pass
    return True
