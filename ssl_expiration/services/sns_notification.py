"""
SNS通知服务
"""
import os
import time
from typing import List, Optional
import logging
from datetime import datetime, timezone

import boto3
from botocore.exceptions import ClientError, BotoCoreError

from ..interfaces import NotificationServiceInterface
from ..models import HostCheckResult


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现"""

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 warning_days: int = 7):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则从ARN或环境变量推断
            warning_days: 提前警告天数
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.warning_days = warning_days

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)

        self.sns_client = None
        if self.topic_arn:
            try:
                self.sns_client = boto3.client('sns', region_name=self.region_name)
                self.logger.info(f"SNS客户端初始化成功，区域: {self.region_name}")
            except BotoCoreError as e:
                self.logger.error(f"初始化SNS客户端失败: {str(e)}")

    @property
    def is_configured(self) -> bool:
        return bool(self.topic_arn) and self.sns_client is not None

    def send_expiry_notification(self, results: List[HostCheckResult]) -> bool:
        """
        发送证书过期通知

        Args:
            results: 已过期或即将过期的检查结果

        Returns:
            bool: 发送是否成功
        """
        if not results:
            self.logger.info("没有过期或即将过期的证书，跳过通知发送")
            return True

        if not self._validate_configuration():
            return False

        subject = self._format_subject(results)
        message = self.format_notification_content(results)

        return self._publish_with_retry(subject, message)

    def _publish_with_retry(self, subject: str, message: str, max_retries: int = 3) -> bool:
        """
        带重试机制的SNS消息发布

        Args:
            subject: 消息主题
            message: 消息内容
            max_retries: 最大重试次数

        Returns:
            bool: 发送是否成功
        """
        for attempt in range(max_retries + 1):
            try:
                response = self.sns_client.publish(
                    TopicArn=self.topic_arn,
                    Subject=subject,
                    Message=message
                )

                self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
                return True

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                if self._is_retryable_error(error_code) and attempt < max_retries:
                    wait_time = 2 ** attempt  # 指数退避
                    self.logger.warning(
                        f"SNS发送失败 (尝试 {attempt + 1}/{max_retries + 1}) - {error_code}: {error_message}，"
                        f"{wait_time}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
                return False

            except BotoCoreError as e:
                self.logger.error(f"发送SNS通知时发生错误: {str(e)}")
                return False

        return False

    def _is_retryable_error(self, error_code: str) -> bool:
        """判断AWS错误代码是否可重试"""
        return error_code in {
            'Throttling',
            'ServiceUnavailable',
            'InternalError',
            'RequestTimeout'
        }

    def format_notification_content(self, results: List[HostCheckResult]) -> str:
        """
        格式化通知内容

        Args:
            results: 检查结果列表

        Returns:
            str: 格式化的通知内容
        """
        if not results:
            return "所有SSL证书状态正常。"

        expired = [r for r in results if r.is_success and r.expiration.is_expired]
        expiring = [r for r in results
                    if r.is_success and r.expiration.is_expiring_soon(self.warning_days)]

        lines = [
            "SSL证书过期监控报告",
            "=" * 30,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC",
            ""
        ]

        if expired:
            lines.extend(["已过期证书:", ""])
            for result in expired:
                lines.append(f"• {result.host}")
                lines.append(f"  已过期: {abs(result.expiration.days)} 天")
                lines.extend(self._format_details(result))
                lines.append("")

        if expiring:
            lines.extend([f"即将过期证书 ({self.warning_days}天内):", ""])
            for result in expiring:
                lines.append(f"• {result.host}")
                lines.append(f"  剩余天数: {result.expiration.days} 天")
                lines.extend(self._format_details(result))
                lines.append("")

        lines.append("此消息由SSL证书过期检查工具自动发送。")

        return "\n".join(lines)

    def _format_details(self, result: HostCheckResult) -> List[str]:
        details = []
        if result.expiration.not_after:
            details.append(f"  过期时间: {result.expiration.not_after.strftime('%Y-%m-%d %H:%M:%S')} UTC")
        if result.expiration.alternative_names:
            details.append(f"  备用名称: {', '.join(result.expiration.alternative_names)}")
        return details

    def _format_subject(self, results: List[HostCheckResult]) -> str:
        """
        格式化通知主题

        Args:
            results: 检查结果列表

        Returns:
            str: 通知主题
        """
        expired_count = len([r for r in results if r.is_success and r.expiration.is_expired])
        expiring_count = len([r for r in results
                              if r.is_success and r.expiration.is_expiring_soon(self.warning_days)])

        if expired_count > 0 and expiring_count > 0:
            return f"SSL证书警报: {expired_count}个已过期, {expiring_count}个即将过期"
        elif expired_count > 0:
            return f"SSL证书警报: {expired_count}个证书已过期"
        elif expiring_count > 0:
            return f"SSL证书提醒: {expiring_count}个证书即将过期"
        else:
            return "SSL证书状态报告"

    def _validate_configuration(self) -> bool:
        """
        验证配置是否正确

        Returns:
            bool: 配置是否有效
        """
        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        if not self.sns_client:
            self.logger.error("SNS客户端未初始化")
            return False

        return True
