"""
错误处理服务
"""
import socket
import ssl
from typing import Any, Dict, List
from datetime import datetime, timezone
import logging

from ..errors import (
    SslExpirationError,
    ResolutionOrConnectionError,
    CryptoLibraryError,
    HandshakeError,
    CertificateNotFoundError
)


class ErrorHandler:
    """证书检查错误处理器

    只负责把检查错误整理成结构化信息并记录日志，不做重试。
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def handle_check_error(self, host: str, error: Exception) -> Dict[str, Any]:
        """
        处理证书检查错误

        Args:
            host: 主机
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误处理结果
        """
        error_info = {
            'host': host,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'is_expected': isinstance(error, SslExpirationError),
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error)
        }

        if error_info['is_expected']:
            self.logger.debug(f"主机 {host} 证书检查失败: {error_info['error_message']}")
        else:
            self.logger.error(f"主机 {host} 证书检查发生意外错误: {error_info['error_type']}: {error_info['error_message']}")

        return error_info

    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        cause = error.__cause__
        error_message = str(error).lower()

        if isinstance(error, ResolutionOrConnectionError):
            if isinstance(cause, socket.gaierror):
                return "检查域名是否正确，DNS服务器是否可用"
            elif isinstance(cause, ConnectionRefusedError):
                return "检查目标服务器是否运行，端口是否正确"
            elif 'network is unreachable' in error_message:
                return "网络不可达，检查网络连接和路由"
            elif 'no route to host' in error_message:
                return "无法路由到主机，检查防火墙和网络配置"
            return "检查网络连接和服务器状态"
        elif isinstance(error, HandshakeError):
            if isinstance(cause, ssl.SSLError) and 'version' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            elif isinstance(cause, ConnectionResetError):
                return "连接在握手时被重置，检查端口是否提供TLS服务"
            return "SSL握手失败，检查服务器SSL配置"
        elif isinstance(error, CertificateNotFoundError):
            return "服务器未提供证书，检查服务器证书配置"
        elif isinstance(error, CryptoLibraryError):
            return "证书数据无法解析，检查服务器证书是否损坏"
        return "检查网络连接和服务器状态"

    def get_error_statistics(self, error_list: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        获取错误统计信息

        Args:
            error_list: 错误信息列表

        Returns:
            Dict[str, Any]: 错误统计
        """
        if not error_list:
            return {
                'total_errors': 0,
                'error_types': {},
                'most_common_error': None,
                'most_common_error_count': 0
            }

        error_types = {}
        for error_info in error_list:
            error_type = error_info.get('error_type', 'Unknown')
            error_types[error_type] = error_types.get(error_type, 0) + 1

        most_common_error = max(error_types.items(), key=lambda x: x[1])

        return {
            'total_errors': len(error_list),
            'error_types': error_types,
            'most_common_error': most_common_error[0],
            'most_common_error_count': most_common_error[1]
        }
