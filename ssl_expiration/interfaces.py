"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Union
from .models import CertificateExpiration, HostCheckResult


class SslExpirationCheckerInterface(ABC):
    """SSL证书过期检查器接口"""

    @abstractmethod
    def check(self, host_spec: str) -> CertificateExpiration:
        """按域名检查证书，默认端口443"""
        pass

    @abstractmethod
    def check_address(self, address_spec: Union[str, Tuple[str, int]]) -> CertificateExpiration:
        """按显式地址检查证书"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_expiry_notification(self, results: List[HostCheckResult]) -> bool:
        """发送证书过期通知"""
        pass

    @abstractmethod
    def format_notification_content(self, results: List[HostCheckResult]) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, host_count: int):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_certificate_info(self, host: str, expiration: CertificateExpiration):
        """记录证书信息"""
        pass

    @abstractmethod
    def log_error(self, host: str, error: Exception, error_info: Optional[Dict[str, Any]] = None):
        """记录错误信息"""
        pass
