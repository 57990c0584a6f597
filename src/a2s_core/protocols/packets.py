# File: src/a2s_core/protocols/packets.py
"""
A2S 请求包构建器 (Packet Builders)

负责构建四种请求数据报。
本模块是无状态的 (Stateless)，不持有任何配置或会话信息。
"""

from . import constants


def build_info_request() -> bytes:
    """构建 A2S_INFO 请求包。

    结构: Header(4B) + 'T' + "Source Engine Query\\0"
    """
    return constants.SIMPLE_HEADER + constants.Command.INFO + constants.INFO_QUERY_STRING


def build_challenge_request() -> bytes:
    """构建 Challenge 请求包。

    使用 A2S_PLAYER 命令并携带占位 Challenge (0xFFFFFFFF)，
    服务器会以 'A' 类型响应返回真正的 Challenge。
    """
    return (
        constants.SIMPLE_HEADER
        + constants.Command.PLAYER
        + constants.CHALLENGE_PLACEHOLDER
    )


def build_players_request(challenge: bytes) -> bytes:
    """构建 A2S_PLAYER 请求包。

    Args:
        challenge: 之前从服务器获取的 Challenge。

    Returns:
        bytes: Header(4B) + 0x55 + Challenge
    """
    return constants.SIMPLE_HEADER + constants.Command.PLAYER + challenge


def build_rules_request(challenge: bytes) -> bytes:
    """构建 A2S_RULES 请求包。

    Args:
        challenge: 之前从服务器获取的 Challenge。

    Returns:
        bytes: Header(4B) + 0x56 + Challenge
    """
    return constants.SIMPLE_HEADER + constants.Command.RULES + challenge
