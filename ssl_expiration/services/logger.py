"""
日志服务
"""
import os
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import CertificateExpiration

DEFAULT_LOG_LEVEL = 'WARNING'


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = "ssl_expiration", log_level: Optional[str] = None,
                 warning_days: int = 7):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
            warning_days: 提前警告天数
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', DEFAULT_LOG_LEVEL)
        self.warning_days = warning_days

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

        self.execution_stats = self._empty_stats()

    def _empty_stats(self) -> Dict[str, Any]:
        return {
            'start_time': None,
            'end_time': None,
            'total_hosts': 0,
            'successful_checks': 0,
            'failed_checks': 0,
            'errors': []
        }

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.WARNING)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)
        else:
            for handler in self.logger.handlers:
                handler.setLevel(level)

        # 防止日志传播到根日志器
        self.logger.propagate = False

    def log_check_start(self, host_count: int):
        """
        记录检查开始

        Args:
            host_count: 要检查的主机数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['total_hosts'] = host_count

        self.logger.info(f"开始SSL证书检查，共 {host_count} 个主机")
        self.logger.info(f"检查开始时间: {self.execution_stats['start_time'].isoformat()}")

    def log_certificate_info(self, host: str, expiration: CertificateExpiration):
        """
        记录证书信息

        Args:
            host: 主机
            expiration: 证书过期信息
        """
        self.execution_stats['successful_checks'] += 1
        not_after = expiration.not_after.isoformat() if expiration.not_after else "unknown"

        if expiration.is_expired:
            self.logger.info(
                f"证书已过期 - 主机: {host}, "
                f"过期时间: {not_after}, "
                f"已过期: {abs(expiration.days)} 天"
            )
        elif expiration.is_expiring_soon(self.warning_days):
            self.logger.info(
                f"证书即将过期 - 主机: {host}, "
                f"过期时间: {not_after}, "
                f"剩余天数: {expiration.days} 天"
            )
        else:
            self.logger.info(
                f"证书正常 - 主机: {host}, "
                f"过期时间: {not_after}, "
                f"剩余天数: {expiration.days} 天"
            )

        if expiration.alternative_names:
            self.logger.debug(f"主机 {host} 备用名称: {', '.join(expiration.alternative_names)}")

    def log_error(self, host: str, error: Exception, error_info: Optional[Dict[str, Any]] = None):
        """
        记录错误信息

        命令行会自行把错误打印到stderr，这里只在INFO级别记录，
        默认日志级别下不会重复输出。

        Args:
            host: 主机
            error: 异常对象
            error_info: ErrorHandler整理好的错误信息，为None时在此生成
        """
        if error_info is None:
            error_info = {
                'host': host,
                'error_type': type(error).__name__,
                'error_message': str(error),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }

        self.execution_stats['failed_checks'] += 1
        self.execution_stats['errors'].append(error_info)

        message = f"主机 {host} 检查时发生错误: {error_info['error_type']}: {error_info['error_message']}"
        if error_info.get('suggested_action'):
            message += f"，建议: {error_info['suggested_action']}"
        self.logger.info(message)

        # 记录详细的堆栈跟踪（调试级别）
        self.logger.debug(f"主机 {host} 错误堆栈跟踪:\n{''.join(traceback.format_exception(type(error), error, error.__traceback__))}")

    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)

        self.logger.info("SSL证书检查完成")
        self.logger.info(f"检查结束时间: {self.execution_stats['end_time'].isoformat()}")
        self.logger.info(
            f"检查统计: 总计 {self.execution_stats['total_hosts']} 个主机, "
            f"成功 {self.execution_stats['successful_checks']} 个, "
            f"失败 {self.execution_stats['failed_checks']} 个"
        )

    def log_notification_sent(self, notification_type: str, host_count: int, success: bool):
        """
        记录通知发送状态

        Args:
            notification_type: 通知类型（如 "SNS"）
            host_count: 通知中包含的主机数量
            success: 是否发送成功
        """
        if success:
            self.logger.info(f"{notification_type} 通知发送成功，主机数量: {host_count}")
        else:
            self.logger.error(f"{notification_type} 通知发送失败，主机数量: {host_count}")

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        safe_config = self._sanitize_config(config)

        self.logger.info("系统配置信息:")
        for key, value in safe_config.items():
            self.logger.info(f"  {key}: {value}")

    def _sanitize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        清理配置信息中的敏感数据

        Args:
            config: 原始配置

        Returns:
            Dict[str, Any]: 清理后的配置
        """
        safe_config = {}
        for key, value in config.items():
            key_lower = key.lower()

            is_sensitive = (
                key_lower in ('password', 'secret', 'token', 'key', 'sns_topic_arn') or
                key_lower.endswith('_key') or
                key_lower.endswith('_secret') or
                key_lower.endswith('_password') or
                key_lower.endswith('_token')
            )

            if is_sensitive and isinstance(value, str) and value:
                if 'arn:' in value:
                    # ARN只显示前缀和资源名
                    parts = value.split(':')
                    if len(parts) >= 6:
                        safe_value = f"{':'.join(parts[:3])}:***:{parts[-2]}:{parts[-1]}"
                    else:
                        safe_value = "***"
                else:
                    safe_value = value[:3] + "***" if len(value) > 3 else "***"
                safe_config[key] = safe_value
            else:
                safe_config[key] = value

        return safe_config

    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要

        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()

        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'total_hosts': stats['total_hosts'],
            'successful_checks': stats['successful_checks'],
            'failed_checks': stats['failed_checks'],
            'success_rate': (
                stats['successful_checks'] / stats['total_hosts']
                if stats['total_hosts'] > 0 else 0
            ),
            'error_count': len(stats['errors']),
            'errors': stats['errors']
        }

    def log_execution_summary(self):
        """记录执行摘要"""
        summary = self.get_execution_summary()

        self.logger.info("=" * 50)
        self.logger.info("执行摘要")
        self.logger.info("=" * 50)
        self.logger.info(f"执行时长: {summary['duration_seconds']:.2f} 秒")
        self.logger.info(f"总主机数: {summary['total_hosts']}")
        self.logger.info(f"成功检查: {summary['successful_checks']}")
        self.logger.info(f"失败检查: {summary['failed_checks']}")
        self.logger.info(f"成功率: {summary['success_rate']:.1%}")

        if summary['errors']:
            self.logger.info(f"错误数量: {summary['error_count']}")
            for i, error in enumerate(summary['errors'][:5], 1):  # 只显示前5个错误
                self.logger.info(f"  错误 {i}: {error['host']} - {error['error_type']}: {error['error_message']}")

            if len(summary['errors']) > 5:
                self.logger.info(f"  ... 还有 {len(summary['errors']) - 5} 个错误")

        self.logger.info("=" * 50)
