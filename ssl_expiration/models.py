"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Tuple

from .errors import SslExpirationError

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class CertificateExpiration:
    """SSL证书过期信息"""
    remaining_seconds: int
    alternative_names: Tuple[str, ...] = ()
    not_after: Optional[datetime] = None

    @property
    def seconds(self) -> int:
        """距离过期的秒数（负数表示已过期）"""
        return self.remaining_seconds

    @property
    def days(self) -> int:
        """距离过期的天数（向零截断，负数表示已过期）"""
        days = abs(self.remaining_seconds) // SECONDS_PER_DAY
        return days if self.remaining_seconds >= 0 else -days

    @property
    def is_expired(self) -> bool:
        """判断是否已过期，恰好为0秒时不算过期"""
        return self.remaining_seconds < 0

    def is_expiring_soon(self, warning_days: int) -> bool:
        """判断是否在警告期内即将过期"""
        return not self.is_expired and self.days <= warning_days


@dataclass
class HostCheckResult:
    """单个主机的检查结果"""
    host: str
    expiration: Optional[CertificateExpiration] = None
    error: Optional[SslExpirationError] = None

    @property
    def is_success(self) -> bool:
        return self.expiration is not None and self.error is None


@dataclass
class CheckResult:
    """检查结果统计"""
    total_hosts: int
    successful_checks: int
    failed_checks: int
    expiring_hosts: List[HostCheckResult]
    expired_hosts: List[HostCheckResult]
    errors: List[str]
    execution_time: float
    exit_code: int = 0
    results: List[HostCheckResult] = field(default_factory=list)
