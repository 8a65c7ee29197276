"""
Oracle连接测试

使用配置的凭据建立数据库连接并执行一条存活查询
"""
from typing import Any, Dict

import oracledb

from .config_loader import AppConfig

LIVENESS_QUERY = "SELECT 'OK' AS RESULT FROM DUAL"


async def check_oracle_connection(config: AppConfig) -> Dict[str, Any]:
    """
    测试Oracle数据库连通性

    凭据不全时直接返回失败，不尝试连接；连接无论成功与否都会被释放，
    关闭连接时的错误只记录日志

    Args:
        config: 运行配置（ORACLE_USER / ORACLE_PASSWORD / ORACLE_CONNECTSTRING）

    Returns:
        dict: {"success": bool, "message": str, "result": list} 或
              {"success": False, "message": str, "error": str}
    """
    if not config.oracle_configured:
        return {"success": False, "message": "缺少 ORACLE_* 环境变量。"}

    connection = None
    try:
        connection = await oracledb.connect_async(
            user=config.oracle_user,
            password=config.oracle_password,
            dsn=config.oracle_connect_string
        )
        cursor = connection.cursor()
        await cursor.execute(LIVENESS_QUERY)
        row = await cursor.fetchone()
        return {
            "success": True,
            "message": "连接成功",
            "result": list(row) if row is not None else None
        }
    except Exception as e:
        return {"success": False, "message": f"错误: {e}", "error": str(e)}
    finally:
        if connection is not None:
            try:
                await connection.close()
            except Exception as close_err:
                print(f"[Oracle] 关闭连接出错: {close_err}")
