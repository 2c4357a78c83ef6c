"""
错误类型定义

每一类失败都有独立的异常类型，原始异常通过 ``raise ... from`` 保留在
``__cause__`` 中。核心流程不做任何重试或吞掉异常。
"""


class SslExpirationError(Exception):
    """证书过期检查错误基类"""


class ResolutionOrConnectionError(SslExpirationError):
    """DNS解析或TCP连接失败"""


class CryptoLibraryError(SslExpirationError):
    """TLS/加密库内部错误（上下文创建失败、证书数据损坏等）"""


class HandshakeError(SslExpirationError):
    """TLS握手未完成"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"HandshakeError: {self.message}"


class CertificateNotFoundError(SslExpirationError):
    """握手完成但对端未提供证书"""

    def __init__(self, message: str = "Certificate not found"):
        super().__init__(message)
