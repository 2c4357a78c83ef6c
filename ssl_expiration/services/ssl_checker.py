"""
SSL证书过期检查服务
"""
import logging
from typing import Optional

from ..interfaces import SslExpirationCheckerInterface
from ..models import CertificateExpiration
from .connector import TransportConnector, AddressSpec, parse_address, DEFAULT_PORT
from .handshake import TlsHandshakeLayer
from .evaluator import CertificateEvaluator


class SslExpirationChecker(SslExpirationCheckerInterface):
    """SSL证书过期检查器实现

    每次检查依次执行 连接 -> 握手 -> 评估，任何一步失败都直接抛出对应的
    错误类型，不做重试。套接字和TLS会话在返回前一定会被关闭。
    """

    def __init__(self,
                 connector: Optional[TransportConnector] = None,
                 handshake_layer: Optional[TlsHandshakeLayer] = None,
                 evaluator: Optional[CertificateEvaluator] = None):
        self.connector = connector or TransportConnector()
        self.handshake_layer = handshake_layer or TlsHandshakeLayer()
        self.evaluator = evaluator or CertificateEvaluator()
        self.logger = logging.getLogger(__name__)

    def check(self, host_spec: str) -> CertificateExpiration:
        """
        按域名检查证书，使用HTTPS端口443

        Args:
            host_spec: 域名

        Returns:
            CertificateExpiration: 证书过期信息
        """
        return self.check_address((host_spec.strip(), DEFAULT_PORT))

    def check_address(self, address_spec: AddressSpec) -> CertificateExpiration:
        """
        按显式地址检查证书

        Args:
            address_spec: ``host``、``host:port``、``[ipv6]:port`` 或 ``(host, port)``

        Returns:
            CertificateExpiration: 证书过期信息

        Raises:
            ResolutionOrConnectionError: 解析或连接失败
            CryptoLibraryError: TLS库错误
            HandshakeError: 握手失败
            CertificateNotFoundError: 对端未提供证书
        """
        host, port = parse_address(address_spec, self.connector.default_port)
        self.logger.debug(f"开始检查 {host}:{port}")

        with self.connector.connect((host, port)) as sock:
            with self.handshake_layer.handshake(sock, server_hostname=host) as tls_sock:
                expiration = self.evaluator.evaluate(tls_sock)

        self.logger.debug(f"{host}:{port} 证书剩余 {expiration.seconds} 秒")
        return expiration


def check(host_spec: str) -> CertificateExpiration:
    """按域名检查证书，默认端口443"""
    return SslExpirationChecker().check(host_spec)


def check_address(address_spec: AddressSpec) -> CertificateExpiration:
    """按显式地址检查证书"""
    return SslExpirationChecker().check_address(address_spec)
