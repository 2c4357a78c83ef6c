"""
证书评估服务
"""
import ssl
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm

from ..errors import CertificateNotFoundError, CryptoLibraryError
from ..models import CertificateExpiration, SECONDS_PER_DAY


def utc_now() -> datetime:
    """当前UTC时间"""
    return datetime.now(timezone.utc)


class CertificateEvaluator:
    """证书评估器"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        初始化证书评估器

        Args:
            clock: 返回当前UTC时间的函数，默认使用系统时间
        """
        self.clock = clock or utc_now
        self.logger = logging.getLogger(__name__)

    def evaluate(self, tls_sock: ssl.SSLSocket) -> CertificateExpiration:
        """
        从已完成握手的TLS会话中提取并评估叶子证书

        Args:
            tls_sock: 已完成握手的TLS会话

        Returns:
            CertificateExpiration: 证书过期信息

        Raises:
            CertificateNotFoundError: 对端未提供证书
            CryptoLibraryError: 证书数据无法解析
        """
        der = tls_sock.getpeercert(binary_form=True)
        if not der:
            raise CertificateNotFoundError()

        return self.evaluate_der(der)

    def evaluate_der(self, der: bytes) -> CertificateExpiration:
        """
        评估DER编码的证书

        Args:
            der: DER编码的证书

        Returns:
            CertificateExpiration: 证书过期信息
        """
        cert = self.load_certificate(der)
        alternative_names = self.get_alternative_names(cert)
        not_after = cert.not_valid_after_utc

        # notBefore只记录，不参与评估
        self.logger.debug(f"not before: {cert.not_valid_before_utc.isoformat()}")
        self.logger.debug(f"not after: {not_after.isoformat()}")
        self.logger.debug(f"Verify: {'自签名' if self.is_self_signed(cert) else '非自签名'}")

        return CertificateExpiration(
            remaining_seconds=self.calculate_remaining_seconds(not_after),
            alternative_names=alternative_names,
            not_after=not_after
        )

    def is_self_signed(self, cert: x509.Certificate) -> bool:
        """
        用证书自身的公钥校验其签名

        仅用于调试输出，不影响评估结果，也不构成信任判断。

        Args:
            cert: 证书

        Returns:
            bool: 是否为自签名证书
        """
        try:
            cert.verify_directly_issued_by(cert)
        except (ValueError, TypeError, InvalidSignature, UnsupportedAlgorithm):
            return False
        return True

    def load_certificate(self, der: bytes) -> x509.Certificate:
        """
        解析DER证书

        Raises:
            CryptoLibraryError: 证书数据损坏
        """
        try:
            return x509.load_der_x509_certificate(der)
        except ValueError as e:
            raise CryptoLibraryError(f"无法解析证书: {e}") from e

    def get_alternative_names(self, cert: x509.Certificate) -> Tuple[str, ...]:
        """
        读取主题备用名称中的DNS名称

        保持扩展中的原始顺序，IP、邮箱等其他类型直接忽略。

        Args:
            cert: 证书

        Returns:
            Tuple[str, ...]: DNS名称，没有该扩展时为空
        """
        try:
            extension = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        except x509.ExtensionNotFound:
            return ()
        except (x509.DuplicateExtension, ValueError) as e:
            raise CryptoLibraryError(f"主题备用名称扩展无效: {e}") from e

        return tuple(extension.value.get_values_for_type(x509.DNSName))

    def calculate_remaining_seconds(self, not_after: datetime) -> int:
        """
        计算距离过期的秒数

        "现在"在评估时只取一次，并与证书字段一样截断到整秒。timedelta
        规范化后 ``seconds`` 总是非负、``days`` 带符号，因此
        ``days * 86400 + seconds`` 就是带符号的总秒数。

        Args:
            not_after: 证书过期时间（UTC）

        Returns:
            int: 剩余秒数（负数表示已过期）
        """
        now = self.clock().replace(microsecond=0)
        delta = not_after - now
        return delta.days * SECONDS_PER_DAY + delta.seconds
