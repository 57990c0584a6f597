# File: src/a2s_core/exceptions.py
"""
A2S 查询库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/Bot）能进行精细的错误处理。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import ResponseKind


class A2SError(Exception):
    """A2S 查询库所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 a2s-core 抛出的已知错误。
    """

    pass


class ConfigError(A2SError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口不是整数、超出范围)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(A2SError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. 向已关闭的连接发送数据。
    2. sendto 失败。
    """

    pass


class TransportBindError(NetworkError):
    """本地 UDP 端点无法打开 (端口被占用、权限不足等)。"""

    pass


class AddressResolutionError(NetworkError):
    """主机名解析 (DNS) 失败。"""

    pass


class ProtocolError(A2SError):
    """协议交互错误 (逻辑级别)。"""

    pass


class MalformedResponseError(ProtocolError):
    """服务器响应无法解码。

    触发场景:
    1. 缺少 0xFFFFFFFF 包头。
    2. 未知的响应类型字节。
    3. 字段被截断或字符串缺少结束符。

    如果能确定该响应属于哪类请求，`kind` 会被设置，
    异常随后被投递给对应的等待者。
    """

    def __init__(self, message: str, kind: "ResponseKind | None" = None) -> None:
        """初始化解码错误。

        Args:
            message: 错误描述信息。
            kind: 该响应对应的请求类型；无法归属时为 None。
        """
        super().__init__(message)
        self.kind = kind


class TruncatedPacketError(MalformedResponseError):
    """定长字段读取时剩余字节不足。"""

    pass


class MissingTerminatorError(MalformedResponseError):
    """以 0x00 结尾的字符串在缓冲区末尾之前没有找到结束符。"""

    pass


class UnknownResponseError(MalformedResponseError):
    """包头缺失或响应类型字节不在已知集合内，无法归属到任何请求。"""

    pass
