"""
A2S 查询库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (.env) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_QUERY_PORT = 27015
DEFAULT_LOCAL_PORT = 6000
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class QueryConfig:
    """A2S 连接的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 目标服务器地址 (IP 或主机名)。
        port: 目标服务器查询端口 (通常为 27015)。
        local_port: 本地绑定的 UDP 端口，0 表示由系统分配。
        bind_ip: 本地绑定 IP (通常为 0.0.0.0)。
        timeout: 调用方等待单次查询的超时秒数。核心层不使用此值。
    """

    host: str
    port: int = DEFAULT_QUERY_PORT
    local_port: int = DEFAULT_LOCAL_PORT
    bind_ip: str = "0.0.0.0"
    timeout: float = DEFAULT_TIMEOUT

    @property
    def server_address(self) -> tuple[str, int]:
        return self.host, self.port


def create_config_from_dict(raw_data: dict[str, Any]) -> QueryConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        QueryConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """

    def _req(key: str) -> Any:
        """获取必要字段，缺失则报错"""
        if key not in raw_data or raw_data[key] in (None, ""):
            raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
        return raw_data[key]

    def _port(key: str, default: int, allow_zero: bool = False) -> int:
        val = raw_data.get(key, default)
        try:
            port = int(val)
        except (TypeError, ValueError):
            raise ConfigError(f"端口格式无效 '{key}': {val}") from None
        low = 0 if allow_zero else 1
        if not low <= port <= 0xFFFF:
            raise ConfigError(f"端口超出范围 '{key}': {port}")
        return port

    def _positive_float(key: str, default: float) -> float:
        val = raw_data.get(key, default)
        try:
            num = float(val)
        except (TypeError, ValueError):
            raise ConfigError(f"数值格式无效 '{key}': {val}") from None
        if num <= 0:
            raise ConfigError(f"'{key}' 必须为正数: {num}")
        return num

    return QueryConfig(
        host=str(_req("host")).strip(),
        port=_port("port", DEFAULT_QUERY_PORT),
        local_port=_port("local_port", DEFAULT_LOCAL_PORT, allow_zero=True),
        bind_ip=str(raw_data.get("bind_ip", "0.0.0.0")),
        timeout=_positive_float("timeout", DEFAULT_TIMEOUT),
    )


def load_config_from_toml(file_path: Path, profile: str = "default") -> QueryConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [a2s]: 单服务器配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]
    elif "a2s" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [a2s] 节，忽略 profile='{profile}'。")
        raw_config = data["a2s"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env(env_file: Path | None = None) -> QueryConfig:
    """从环境变量加载配置。

    读取所有以 `A2S_` 开头的相关环境变量，例如 `A2S_HOST` -> `host`。
    如果提供了 env_file，会先通过 python-dotenv 将其加载进环境 (不覆盖已有变量)。

    Raises:
        ConfigError: 未检测到任何相关环境变量，或 env_file 不存在。
    """
    if env_file is not None:
        if not env_file.exists():
            raise ConfigError(f".env 文件未找到: {env_file}")
        load_dotenv(dotenv_path=env_file, override=False)

    env_map = {
        "host": "HOST",
        "port": "PORT",
        "local_port": "LOCAL_PORT",
        "bind_ip": "BIND_IP",
        "timeout": "TIMEOUT",
    }

    raw_data = {}
    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"A2S_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 A2S_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
