# src/a2s_core/__init__.py
"""
a2s-core v1.0.0
基于 asyncio 的 A2S (Source 引擎服务器查询协议) 客户端核心库。
"""

# 暴露核心配置
from .config import (
    QueryConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露连接与状态
from .core import QueryConnection, connect

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    A2SError,
    AddressResolutionError,
    ConfigError,
    MalformedResponseError,
    MissingTerminatorError,
    NetworkError,
    ProtocolError,
    TransportBindError,
    TruncatedPacketError,
    UnknownResponseError,
)
from .models import (
    QueryPlayer,
    ServerInfo,
    ServerOS,
    ServerType,
    ServerVAC,
    ServerVisibility,
)
from .state import ResponseKind

__version__ = "1.0.0"

__all__ = [
    "connect",
    "QueryConnection",
    "QueryConfig",
    "ResponseKind",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "ServerInfo",
    "QueryPlayer",
    "ServerType",
    "ServerOS",
    "ServerVisibility",
    "ServerVAC",
    "A2SError",
    "ConfigError",
    "NetworkError",
    "TransportBindError",
    "AddressResolutionError",
    "ProtocolError",
    "MalformedResponseError",
    "TruncatedPacketError",
    "MissingTerminatorError",
    "UnknownResponseError",
]
