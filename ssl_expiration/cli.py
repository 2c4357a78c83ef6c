"""
命令行入口
"""
import argparse
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional, TextIO

from .errors import SslExpirationError, ResolutionOrConnectionError
from .models import CheckResult, HostCheckResult
from .services.error_handler import ErrorHandler
from .services.expiry_calculator import ExpiryCalculator, DEFAULT_WARNING_DAYS
from .services.host_config import HostConfigManager
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService
from .services.ssl_checker import SslExpirationChecker


class SslExpirationMonitor:
    """SSL证书过期监控器主类

    逐个检查主机，单个主机的错误只记录，不影响其余主机。
    """

    def __init__(self, warning_days: int = DEFAULT_WARNING_DAYS,
                 log_level: Optional[str] = None,
                 sns_topic_arn: Optional[str] = None,
                 out: Optional[TextIO] = None,
                 err: Optional[TextIO] = None):
        self.warning_days = warning_days
        self.out = out or sys.stdout
        self.err = err or sys.stderr

        self.logger_service = LoggerService(log_level=log_level, warning_days=warning_days)
        self.host_manager = HostConfigManager()
        self.checker = SslExpirationChecker()
        self.error_handler = ErrorHandler()
        self.expiry_calculator = ExpiryCalculator(warning_days=warning_days)
        self.notification_service = SNSNotificationService(
            topic_arn=sns_topic_arn, warning_days=warning_days
        )

        self._log_configuration()

    def _log_configuration(self):
        """记录系统配置信息"""
        config = {
            'hosts_env_var': os.getenv(self.host_manager.env_var_name, ''),
            'sns_topic_arn': self.notification_service.topic_arn or '',
            'log_level': self.logger_service.log_level,
            'warning_days': self.warning_days
        }

        self.logger_service.log_configuration_info(config)

    def execute(self, hosts: Optional[List[str]] = None) -> CheckResult:
        """
        执行SSL证书检查

        Args:
            hosts: 要检查的主机，为空时从环境变量读取

        Returns:
            CheckResult: 检查结果
        """
        start_time = datetime.now(timezone.utc)
        host_entries = self.host_manager.get_host_entries(hosts)

        if not host_entries:
            self.logger_service.logger.warning("没有找到要检查的主机")
            return CheckResult(
                total_hosts=0,
                successful_checks=0,
                failed_checks=0,
                expiring_hosts=[],
                expired_hosts=[],
                errors=["没有找到要检查的主机"],
                execution_time=0.0,
                exit_code=0
            )

        self.logger_service.log_check_start(len(host_entries))

        results = [
            self.check_host(host) if is_valid else self.reject_host(host)
            for host, is_valid in host_entries
        ]
        categorized = self.expiry_calculator.categorize(results)

        self._send_notifications(categorized)

        self.logger_service.log_check_end()
        self.logger_service.log_execution_summary()
        self.logger_service.logger.info(self.expiry_calculator.get_expiry_summary(results))
        self._log_error_statistics()

        execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        exit_code = 1 if categorized['expired'] or categorized['expiring_soon'] else 0

        return CheckResult(
            total_hosts=len(host_entries),
            successful_checks=len(categorized['successful']),
            failed_checks=len(categorized['failed']),
            expiring_hosts=categorized['expiring_soon'],
            expired_hosts=categorized['expired'],
            errors=[f"{result.host}: {result.error}" for result in categorized['failed']],
            execution_time=execution_time,
            exit_code=exit_code,
            results=results
        )

    def check_host(self, host: str) -> HostCheckResult:
        """
        检查单个主机并输出结果

        Args:
            host: 主机

        Returns:
            HostCheckResult: 检查结果
        """
        try:
            if self.host_manager.has_explicit_port(host):
                expiration = self.checker.check_address(host)
            else:
                expiration = self.checker.check(host)
        except SslExpirationError as e:
            return self._report_error(host, e)

        self.logger_service.log_certificate_info(host, expiration)

        for name in expiration.alternative_names:
            print(f"Alt: {name}", file=self.out)

        days = expiration.days
        if expiration.is_expired:
            print(f"{host} SSL certificate expired {abs(days)} days ago", file=self.err)
        elif expiration.is_expiring_soon(self.warning_days):
            print(f"{host} SSL certificate will expire soon, in {days} days", file=self.out)
        else:
            print(f"{host} SSL certificate will expire in {days} days", file=self.out)

        return HostCheckResult(host=host, expiration=expiration)

    def reject_host(self, host: str) -> HostCheckResult:
        """
        报告格式无效、无法检查的主机

        Args:
            host: 原始输入

        Returns:
            HostCheckResult: 失败的检查结果
        """
        return self._report_error(host, ResolutionOrConnectionError(f"无效的主机: {host}"))

    def _report_error(self, host: str, error: SslExpirationError) -> HostCheckResult:
        """每个失败的主机只向stderr输出一行"""
        error_info = self.error_handler.handle_check_error(host, error)
        self.logger_service.log_error(host, error, error_info)
        print(f"An error occured when checking {host}: {error}", file=self.err)
        return HostCheckResult(host=host, error=error)

    def _log_error_statistics(self):
        """记录错误类型统计"""
        stats = self.error_handler.get_error_statistics(self.logger_service.execution_stats['errors'])
        if not stats['total_errors']:
            return

        types = ", ".join(f"{name}: {count}" for name, count in stats['error_types'].items())
        self.logger_service.logger.info(f"错误类型统计: {types}")
        self.logger_service.logger.info(
            f"最常见错误: {stats['most_common_error']} ({stats['most_common_error_count']} 次)"
        )

    def _send_notifications(self, categorized: dict) -> bool:
        """
        发送通知

        Args:
            categorized: 分类后的检查结果

        Returns:
            bool: 通知是否发送成功
        """
        notification_results = categorized['expired'] + categorized['expiring_soon']

        if not notification_results:
            self.logger_service.logger.info("所有证书状态正常，无需发送通知")
            return True

        if not self.notification_service.is_configured:
            self.logger_service.logger.debug("未配置SNS通知，跳过")
            return False

        sent = self.notification_service.send_expiry_notification(notification_results)
        self.logger_service.log_notification_sent("SNS", len(notification_results), sent)
        return sent


def _warning_days_from_env() -> int:
    value = os.getenv('WARNING_DAYS')
    if not value:
        return DEFAULT_WARNING_DAYS
    try:
        return int(value)
    except ValueError:
        return DEFAULT_WARNING_DAYS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssl-expiration",
        description="Check how many days remain before the TLS certificates of remote hosts expire"
    )
    parser.add_argument("hosts", nargs="*",
                        help="Hosts to check: host, host:port or [ipv6]:port (default: $HOSTS)")
    parser.add_argument("--warning-days", type=int, default=_warning_days_from_env(),
                        help=f"Exit with 1 if a certificate expires within this many days (default: {DEFAULT_WARNING_DAYS})")
    parser.add_argument("--sns-topic-arn", help="Publish an alert to this SNS topic (default: $SNS_TOPIC_ARN)")
    parser.add_argument("--log-level", help="Log level (default: $LOG_LEVEL or WARNING)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    monitor = SslExpirationMonitor(
        warning_days=args.warning_days,
        log_level=args.log_level,
        sns_topic_arn=args.sns_topic_arn
    )
    result = monitor.execute(args.hosts)
    return result.exit_code


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
