"""
错误处理服务测试
"""
import socket
import ssl
from unittest.mock import MagicMock

from ssl_expiration.services.error_handler import ErrorHandler
from ssl_expiration.errors import (
    ResolutionOrConnectionError,
    CryptoLibraryError,
    HandshakeError,
    CertificateNotFoundError
)


def chained(error, cause):
    error.__cause__ = cause
    return error


class TestErrorHandler:
    """错误处理器测试类"""

    def setup_method(self):
        self.handler = ErrorHandler()

    def test_handle_check_error(self):
        """测试错误信息结构"""
        error = chained(ResolutionOrConnectionError("无法解析 nope.invalid:443"),
                        socket.gaierror(-2, "Name or service not known"))

        info = self.handler.handle_check_error("nope.invalid", error)

        assert info['host'] == "nope.invalid"
        assert info['error_type'] == "ResolutionOrConnectionError"
        assert info['error_message'] == "无法解析 nope.invalid:443"
        assert info['is_expected'] is True
        assert info['suggested_action'] == "检查域名是否正确，DNS服务器是否可用"
        assert 'timestamp' in info

    def test_suggested_actions(self):
        """测试各类错误的建议处理方案"""
        refused = chained(ResolutionOrConnectionError("refused"), ConnectionRefusedError())
        assert self.handler._get_suggested_action(refused) == "检查目标服务器是否运行，端口是否正确"

        unreachable = ResolutionOrConnectionError("无法连接 x:443: Network is unreachable")
        assert self.handler._get_suggested_action(unreachable) == "网络不可达，检查网络连接和路由"

        reset = chained(HandshakeError("reset"), ConnectionResetError())
        assert self.handler._get_suggested_action(reset) == "连接在握手时被重置，检查端口是否提供TLS服务"

        version = chained(HandshakeError("WRONG_VERSION_NUMBER: wrong version number"), ssl.SSLError())
        assert self.handler._get_suggested_action(version) == "SSL握手失败，检查SSL/TLS版本兼容性"

        assert self.handler._get_suggested_action(CertificateNotFoundError()) == "服务器未提供证书，检查服务器证书配置"
        assert self.handler._get_suggested_action(CryptoLibraryError("bad")) == "证书数据无法解析，检查服务器证书是否损坏"

    def test_unexpected_error(self):
        """测试非检查类错误"""
        info = self.handler.handle_check_error("example.com", RuntimeError("boom"))

        assert info['is_expected'] is False
        assert info['suggested_action'] == "检查网络连接和服务器状态"

    def test_error_statistics_empty(self):
        stats = self.handler.get_error_statistics([])

        assert stats['total_errors'] == 0
        assert stats['most_common_error'] is None

    def test_error_statistics(self):
        errors = [
            {'error_type': 'HandshakeError'},
            {'error_type': 'ResolutionOrConnectionError'},
            {'error_type': 'HandshakeError'},
        ]

        stats = self.handler.get_error_statistics(errors)

        assert stats['total_errors'] == 3
        assert stats['error_types'] == {'HandshakeError': 2, 'ResolutionOrConnectionError': 1}
        assert stats['most_common_error'] == 'HandshakeError'
        assert stats['most_common_error_count'] == 2

    def test_expected_error_logged_at_debug(self):
        """测试检查类错误只记录调试日志，由命令行负责输出"""
        self.handler.logger = MagicMock()

        self.handler.handle_check_error("down.example", ResolutionOrConnectionError("Connection refused"))

        self.handler.logger.debug.assert_called_once()
        self.handler.logger.warning.assert_not_called()
        self.handler.logger.error.assert_not_called()

    def test_unexpected_error_logged_at_error(self):
        self.handler.logger = MagicMock()

        self.handler.handle_check_error("example.com", RuntimeError("boom"))

        self.handler.logger.error.assert_called_once()
