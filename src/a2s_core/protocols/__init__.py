"""
A2S 协议层 (Protocol Layer)

本包负责协议数据包的纯粹构建 (Build) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何状态管理 (State)。
- 不依赖于 core 或 network 层。
"""

from . import constants
from .packets import (
    build_challenge_request,
    build_info_request,
    build_players_request,
    build_rules_request,
)
from .parsers import parse_challenge, parse_info, parse_players, parse_rules
from .reader import ByteReader

# 公共 API
__all__ = [
    "constants",
    "ByteReader",
    "build_info_request",
    "build_challenge_request",
    "build_players_request",
    "build_rules_request",
    "parse_info",
    "parse_challenge",
    "parse_players",
    "parse_rules",
]
