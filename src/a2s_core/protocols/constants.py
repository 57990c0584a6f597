# src/a2s_core/protocols/constants.py
"""
A2S 协议层 - 常量定义

本模块定义了所有协议相关的魔法数字、偏移量和固定值。
采用命名空间 (Class Namespace) 组织。
"""

# =========================================================================
# 1. 包头 (Header)
# =========================================================================

# 单包 (非分片) 数据报的固定前缀
SIMPLE_HEADER = b"\xff\xff\xff\xff"
HEADER_LEN = len(SIMPLE_HEADER)

# 响应类型字节位于包头之后
TAG_OFFSET = HEADER_LEN
PAYLOAD_OFFSET = TAG_OFFSET + 1


# =========================================================================
# 2. 请求操作码 (Client -> Server)
# =========================================================================


class Command:
    """请求包的命令字节"""

    INFO = b"T"  # A2S_INFO (0x54)
    PLAYER = b"\x55"  # A2S_PLAYER，同时用于获取 Challenge
    RULES = b"\x56"  # A2S_RULES


INFO_QUERY_STRING = b"Source Engine Query\x00"

# 请求 Challenge 时使用的占位 Challenge
CHALLENGE_PLACEHOLDER = b"\xff\xff\xff\xff"


# =========================================================================
# 3. A2S_INFO 扩展数据标志位 (EDF)
# =========================================================================


class EDF:
    """Extra Data Flags，按解析顺序排列"""

    PORT = 0x80
    STEAM_ID = 0x10
    SOURCE_TV = 0x40
    KEYWORDS = 0x20
    GAME_ID = 0x01


# 响应体开头的计数字段长度 (解析时跳过，不做校验)
PLAYER_COUNT_LEN = 1
RULES_COUNT_LEN = 2
