"""
TLS握手服务

注意：本模块有意关闭证书校验（``verify_mode = CERT_NONE``，
``check_hostname = False``）。本工具的目的是读取对端出示的证书并计算
剩余有效期，而不是信任它。开启校验后，过期证书和自签名证书会在握手阶段
直接失败，工具就无法报告这些证书的过期情况。不要"修复"成校验模式。
"""
import socket
import ssl
import logging
from typing import Optional

from ..errors import CryptoLibraryError, HandshakeError


class TlsHandshakeLayer:
    """TLS客户端握手层"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def create_context(self) -> ssl.SSLContext:
        """
        创建不校验证书的TLS客户端上下文

        Returns:
            ssl.SSLContext: TLS上下文

        Raises:
            CryptoLibraryError: TLS库无法创建上下文
        """
        try:
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
            # 顺序不能颠倒：必须先关闭主机名检查才能设置CERT_NONE
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        except ssl.SSLError as e:
            raise CryptoLibraryError(f"无法创建TLS上下文: {e}") from e

        return context

    def handshake(self, sock: socket.socket, server_hostname: Optional[str] = None) -> ssl.SSLSocket:
        """
        在已连接的套接字上完成TLS握手

        成功后套接字的所有权转移给返回的TLS会话，由调用方负责关闭。
        失败时会话在抛出异常前关闭。

        Args:
            sock: 已连接的TCP套接字
            server_hostname: 用于SNI的主机名，IP地址不会发送SNI

        Returns:
            ssl.SSLSocket: 已完成握手的TLS会话

        Raises:
            CryptoLibraryError: TLS上下文创建失败
            HandshakeError: 握手未完成
        """
        context = self.create_context()

        try:
            tls_sock = context.wrap_socket(
                sock,
                server_hostname=server_hostname or None,
                do_handshake_on_connect=False
            )
        except (ValueError, UnicodeError, OSError) as e:
            raise HandshakeError(f"无法建立TLS会话: {e}") from e

        try:
            tls_sock.do_handshake()
        except (ssl.SSLError, OSError) as e:
            tls_sock.close()
            raise HandshakeError(self._describe(e)) from e

        self.logger.debug(
            f"TLS握手完成: {tls_sock.version()}, 加密套件: {tls_sock.cipher()[0] if tls_sock.cipher() else 'unknown'}"
        )
        return tls_sock

    def _describe(self, error: Exception) -> str:
        """生成握手失败的描述信息"""
        if isinstance(error, ssl.SSLError) and error.reason:
            return f"{error.reason}: {error}"
        if isinstance(error, socket.timeout):
            return f"握手超时: {error}"
        return str(error) or type(error).__name__
