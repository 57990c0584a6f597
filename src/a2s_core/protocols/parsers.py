# File: src/a2s_core/protocols/parsers.py
"""
A2S 响应解析器 (Response Parsers)

负责将响应负载 (已去除 4 字节包头和 1 字节类型) 解码为 Python 数据结构。
本模块是无状态的，不持有 Challenge 或等待槽位，
解析失败一律抛出 MalformedResponseError 的子类。
"""

import logging

from ..exceptions import MalformedResponseError
from ..models import (
    QueryPlayer,
    ServerInfo,
    ServerOS,
    ServerType,
    ServerVAC,
    ServerVisibility,
)
from . import constants
from .reader import ByteReader

logger = logging.getLogger(__name__)

# =========================================================================
# A2S_INFO ('I')
# =========================================================================


def parse_info(payload: bytes) -> ServerInfo:
    """解析 A2S_INFO 响应。

    基础字段按固定顺序读取；若之后仍有剩余字节，则读取 EDF 标志位，
    并按 0x80 -> 0x10 -> 0x40 -> 0x20 -> 0x01 的顺序读取扩展字段。

    Args:
        payload: 响应负载。

    Returns:
        ServerInfo: 解码后的服务器信息。

    Raises:
        TruncatedPacketError: 定长字段长度不足。
        MissingTerminatorError: 字符串缺少结束符。
    """
    read = ByteReader(payload)

    info = ServerInfo(
        protocol=read.uint8("protocol"),
        name=read.cstring("name"),
        map=read.cstring("map"),
        folder=read.cstring("folder"),
        game=read.cstring("game"),
        app_id=read.int16("app_id"),
        players=read.uint8("players"),
        max_players=read.uint8("max_players"),
        bots=read.uint8("bots"),
        server_type=ServerType(read.uint8("server_type")),
        os=ServerOS(read.uint8("os")),
        visibility=ServerVisibility(read.uint8("visibility")),
        vac=ServerVAC(read.uint8("vac")),
        version=read.cstring("version"),
    )

    if not read.can_read_more():
        return info

    edf = read.uint8("edf")
    extra = {}
    if edf & constants.EDF.PORT:
        extra["port"] = read.uint16("port")
    if edf & constants.EDF.STEAM_ID:
        extra["steam_id"] = read.uint64("steam_id")
    if edf & constants.EDF.SOURCE_TV:
        extra["tv_port"] = read.uint16("tv_port")
        extra["tv_name"] = read.cstring("tv_name")
    if edf & constants.EDF.KEYWORDS:
        extra["keywords"] = read.cstring("keywords")
    if edf & constants.EDF.GAME_ID:
        extra["game_id"] = read.uint64("game_id")

    logger.debug("info_response: edf=0x%02x fields=%s", edf, sorted(extra))
    return info.copy_with(**extra)


# =========================================================================
# Challenge ('A')
# =========================================================================


def parse_challenge(payload: bytes) -> bytes:
    """解析 Challenge 响应。整个负载即为不透明的 Challenge。

    Raises:
        MalformedResponseError: 负载为空。
    """
    if not payload:
        raise MalformedResponseError("Challenge 响应为空")
    return bytes(payload)


# =========================================================================
# A2S_PLAYER ('D')
# =========================================================================


def parse_players(payload: bytes) -> list[QueryPlayer]:
    """解析 A2S_PLAYER 响应。

    首字节为服务器报告的玩家数量，不做独立校验，直接跳过；
    随后循环读取玩家记录直到负载耗尽，保持报文中的顺序。
    """
    read = ByteReader(payload)
    read.skip(constants.PLAYER_COUNT_LEN, "player_count")

    players: list[QueryPlayer] = []
    while read.can_read_more():
        players.append(
            QueryPlayer(
                index=read.uint8("player.index"),
                name=read.cstring("player.name"),
                score=read.int32("player.score"),
                duration=read.float32("player.duration"),
            )
        )
    return players


# =========================================================================
# A2S_RULES ('E')
# =========================================================================


def parse_rules(payload: bytes) -> dict[str, str]:
    """解析 A2S_RULES 响应。

    前两个字节为规则数量 (未使用)，随后是成对的 key/value 字符串。
    重复的 key 以最后一次出现为准。
    """
    read = ByteReader(payload)
    read.skip(constants.RULES_COUNT_LEN, "rule_count")

    rules: dict[str, str] = {}
    while read.can_read_more():
        key = read.cstring("rule.name")
        rules[key] = read.cstring("rule.value")
    return rules
