# File: src/a2s_core/protocols/reader.py
"""
A2S 协议层 - 字节游标 (Byte Reader)

只进不退的读取器。所有多字节整数均为小端序。
每次定长读取前都会校验剩余长度，不足时抛出 TruncatedPacketError，
绝不会越界读取。
"""

import struct

from ..exceptions import MissingTerminatorError, TruncatedPacketError

_UINT8 = struct.Struct("<B")
_INT16 = struct.Struct("<h")
_UINT16 = struct.Struct("<H")
_INT32 = struct.Struct("<i")
_FLOAT32 = struct.Struct("<f")
_UINT64 = struct.Struct("<Q")


class ByteReader:
    """只进游标。"""

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = bytes(data)
        self._pos = offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def can_read_more(self) -> bool:
        return self._pos < len(self._data)

    def _unpack(self, fmt: struct.Struct, name: str):
        if self.remaining < fmt.size:
            raise TruncatedPacketError(
                f"字段 {name} 需要 {fmt.size} 字节，"
                f"偏移 {self._pos} 处仅剩 {self.remaining} 字节"
            )
        (value,) = fmt.unpack_from(self._data, self._pos)
        self._pos += fmt.size
        return value

    def uint8(self, name: str = "uint8") -> int:
        return self._unpack(_UINT8, name)

    def int16(self, name: str = "int16") -> int:
        return self._unpack(_INT16, name)

    def uint16(self, name: str = "uint16") -> int:
        return self._unpack(_UINT16, name)

    def int32(self, name: str = "int32") -> int:
        return self._unpack(_INT32, name)

    def float32(self, name: str = "float32") -> float:
        return self._unpack(_FLOAT32, name)

    def uint64(self, name: str = "uint64") -> int:
        return self._unpack(_UINT64, name)

    def skip(self, count: int, name: str = "padding") -> None:
        """跳过 count 个字节。"""
        if self.remaining < count:
            raise TruncatedPacketError(
                f"字段 {name} 需要跳过 {count} 字节，仅剩 {self.remaining} 字节"
            )
        self._pos += count

    def cstring(self, name: str = "string") -> str:
        """读取以 0x00 结尾的 UTF-8 字符串。

        结束符不计入结果，游标移动到结束符之后。

        Raises:
            MissingTerminatorError: 缓冲区结束前没有 0x00。
        """
        end = self._data.find(b"\x00", self._pos)
        if end == -1:
            raise MissingTerminatorError(
                f"字段 {name} (偏移 {self._pos}) 缺少 0x00 结束符"
            )
        raw = self._data[self._pos : end]
        self._pos = end + 1
        return raw.decode("utf-8", errors="replace")
