# File: src/a2s_core/models.py
"""
A2S 查询库 - 数据模型

解码结果的数据容器与服务器属性枚举。
本模块不包含协议逻辑。
"""

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import IntEnum


class ServerType(IntEnum):
    """服务器类型 (A2S_INFO 中的单字节字符)。"""

    UNKNOWN = -1
    DEDICATED = ord("d")
    LISTEN = ord("l")
    SOURCE_TV = ord("p")

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class ServerOS(IntEnum):
    """服务器操作系统。"""

    UNKNOWN = -1
    LINUX = ord("l")
    WINDOWS = ord("w")
    MAC = ord("m")

    @classmethod
    def _missing_(cls, value):
        # 旧版本服务器使用 'o' 表示 macOS
        if value == ord("o"):
            return cls.MAC
        return cls.UNKNOWN


class ServerVisibility(IntEnum):
    """服务器是否需要密码。"""

    UNKNOWN = -1
    PUBLIC = 0
    PRIVATE = 1

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class ServerVAC(IntEnum):
    """VAC 反作弊状态。"""

    UNKNOWN = -1
    UNSECURED = 0
    SECURED = 1

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


@dataclass(frozen=True)
class ServerInfo:
    """A2S_INFO 响应的解码结果。

    Attributes:
        protocol: 协议版本。
        name: 服务器名称。
        map: 当前地图。
        folder: 游戏目录 (Mod 文件夹名)。
        game: 游戏名称。
        app_id: Steam App ID (有符号 16 位)。
        players: 当前玩家数。
        max_players: 最大玩家数。
        bots: 机器人数量。
        server_type: 服务器类型。
        os: 服务器操作系统。
        visibility: 是否需要密码。
        vac: VAC 状态。
        version: 游戏版本字符串。
        port: [EDF 0x80] 服务器游戏端口。
        steam_id: [EDF 0x10] 服务器 SteamID (64 位)。
        tv_port: [EDF 0x40] SourceTV 端口。
        tv_name: [EDF 0x40] SourceTV 名称。
        keywords: [EDF 0x20] 标签字符串。
        game_id: [EDF 0x01] 64 位 GameID。
    """

    protocol: int
    name: str
    map: str
    folder: str
    game: str
    app_id: int
    players: int
    max_players: int
    bots: int
    server_type: ServerType
    os: ServerOS
    visibility: ServerVisibility
    vac: ServerVAC
    version: str

    # --- 扩展数据 (EDF) ---
    port: int | None = None
    steam_id: int | None = None
    tv_port: int | None = None
    tv_name: str | None = None
    keywords: str | None = None
    game_id: int | None = None

    @property
    def password_protected(self) -> bool:
        return self.visibility == ServerVisibility.PRIVATE

    @property
    def vac_secured(self) -> bool:
        return self.vac == ServerVAC.SECURED

    @property
    def keyword_list(self) -> list[str]:
        """将 keywords 按逗号拆分，未提供时返回空列表。"""
        if not self.keywords:
            return []
        return [k for k in self.keywords.split(",") if k]

    def copy_with(self, **changes) -> "ServerInfo":
        return replace(self, **changes)


@dataclass(frozen=True)
class QueryPlayer:
    """A2S_PLAYER 响应中的单个玩家。

    index 只是玩家在响应中的位置，并非稳定的玩家 ID。
    """

    index: int
    name: str
    score: int
    duration: float

    @property
    def duration_delta(self) -> timedelta:
        return timedelta(seconds=self.duration)
