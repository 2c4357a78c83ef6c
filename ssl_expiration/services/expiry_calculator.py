"""
证书过期计算服务
"""
from typing import Dict, List

from ..models import HostCheckResult

DEFAULT_WARNING_DAYS = 7


class ExpiryCalculator:
    """证书过期分类器"""

    def __init__(self, warning_days: int = DEFAULT_WARNING_DAYS):
        """
        初始化过期计算器

        Args:
            warning_days: 提前警告天数，默认7天
        """
        self.warning_days = warning_days

    def is_expiring_soon(self, result: HostCheckResult) -> bool:
        """判断证书是否即将过期（在警告期内且未过期）"""
        return result.is_success and result.expiration.is_expiring_soon(self.warning_days)

    def is_expired(self, result: HostCheckResult) -> bool:
        """判断证书是否已过期"""
        return result.is_success and result.expiration.is_expired

    def categorize(self, results: List[HostCheckResult]) -> Dict[str, List[HostCheckResult]]:
        """
        对检查结果进行分类

        Args:
            results: 检查结果列表

        Returns:
            dict: 分类结果
        """
        successful = [result for result in results if result.is_success]

        return {
            'successful': successful,
            'failed': [result for result in results if not result.is_success],
            'expired': [result for result in successful if self.is_expired(result)],
            'expiring_soon': [result for result in successful if self.is_expiring_soon(result)],
            'healthy': [result for result in successful
                        if not self.is_expired(result) and not self.is_expiring_soon(result)]
        }

    def get_expiry_summary(self, results: List[HostCheckResult]) -> str:
        """
        获取过期状态摘要

        Args:
            results: 检查结果列表

        Returns:
            str: 摘要信息
        """
        categorized = self.categorize(results)

        summary_parts = [
            f"总计: {len(results)} 个主机",
            f"成功: {len(categorized['successful'])} 个",
            f"失败: {len(categorized['failed'])} 个"
        ]

        if categorized['expired']:
            summary_parts.append(f"已过期: {len(categorized['expired'])} 个")

        if categorized['expiring_soon']:
            summary_parts.append(f"即将过期({self.warning_days}天内): {len(categorized['expiring_soon'])} 个")

        if categorized['healthy']:
            summary_parts.append(f"健康: {len(categorized['healthy'])} 个")

        return ", ".join(summary_parts)
