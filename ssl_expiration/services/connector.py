"""
传输层连接服务
"""
import socket
import logging
from typing import Tuple, Union

from ..errors import ResolutionOrConnectionError

DEFAULT_PORT = 443

AddressSpec = Union[str, Tuple[str, int]]


def parse_address(address_spec: AddressSpec, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """
    解析地址描述

    支持 ``host``、``host:port``、``[ipv6]:port`` 以及 ``(host, port)`` 元组。
    未加方括号的IPv6地址视为不带端口。

    Args:
        address_spec: 地址描述
        default_port: 未指定端口时使用的端口

    Returns:
        Tuple[str, int]: (主机, 端口)

    Raises:
        ResolutionOrConnectionError: 地址格式无效
    """
    if isinstance(address_spec, tuple):
        host, port = address_spec[0], address_spec[1]
        return host, _parse_port(port, address_spec)

    spec = address_spec.strip()
    if not spec:
        raise ResolutionOrConnectionError("地址为空")

    if spec.startswith('['):
        end = spec.find(']')
        if end == -1:
            raise ResolutionOrConnectionError(f"无效的地址: {address_spec}")
        host = spec[1:end]
        rest = spec[end + 1:]
        if not rest:
            return host, default_port
        if not rest.startswith(':'):
            raise ResolutionOrConnectionError(f"无效的地址: {address_spec}")
        return host, _parse_port(rest[1:], address_spec)

    if spec.count(':') == 1:
        host, port = spec.split(':')
        return host, _parse_port(port, address_spec)

    return spec, default_port


def _parse_port(port, address_spec) -> int:
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise ResolutionOrConnectionError(f"无效的端口: {address_spec}") from None

    if not 0 < value < 65536:
        raise ResolutionOrConnectionError(f"端口超出范围: {address_spec}")

    return value


class TransportConnector:
    """TCP连接器，不设置超时，也不做重试"""

    def __init__(self, default_port: int = DEFAULT_PORT):
        self.default_port = default_port
        self.logger = logging.getLogger(__name__)

    def connect(self, address_spec: AddressSpec) -> socket.socket:
        """
        解析地址并建立阻塞式TCP连接

        按解析顺序依次尝试每个候选地址，返回第一个成功的连接。

        Args:
            address_spec: 地址描述

        Returns:
            socket.socket: 已连接的套接字

        Raises:
            ResolutionOrConnectionError: 解析失败或全部候选地址连接失败
        """
        host, port = parse_address(address_spec, self.default_port)

        try:
            candidates = socket.getaddrinfo(host, port, 0, socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as e:
            raise ResolutionOrConnectionError(f"无法解析 {host}:{port}: {e}") from e

        if not candidates:
            raise ResolutionOrConnectionError(f"{host}:{port} 没有可用的地址")

        last_error = None
        for family, socktype, proto, _, sockaddr in candidates:
            sock = None
            try:
                sock = socket.socket(family, socktype, proto)
                sock.connect(sockaddr)
            except OSError as e:
                if sock is not None:
                    sock.close()
                last_error = e
                self.logger.debug(f"连接 {sockaddr} 失败: {e}")
                continue

            self.logger.debug(f"已连接 {host}:{port} ({sockaddr[0]})")
            return sock

        raise ResolutionOrConnectionError(
            f"无法连接 {host}:{port}: {last_error}"
        ) from last_error
