"""
传输层连接测试
"""
import pytest
import socket
from unittest.mock import patch, MagicMock

from ssl_expiration.services.connector import TransportConnector, parse_address
from ssl_expiration.errors import ResolutionOrConnectionError


class TestParseAddress:
    """地址解析测试类"""

    def test_bare_host_defaults_to_443(self):
        assert parse_address("example.com") == ("example.com", 443)

    def test_host_and_port(self):
        assert parse_address("example.com:8443") == ("example.com", 8443)

    def test_tuple(self):
        assert parse_address(("example.com", 993)) == ("example.com", 993)

    def test_bracketed_ipv6(self):
        assert parse_address("[::1]:8443") == ("::1", 8443)
        assert parse_address("[::1]") == ("::1", 443)

    def test_bare_ipv6_is_host_only(self):
        assert parse_address("2001:db8::1") == ("2001:db8::1", 443)

    @pytest.mark.parametrize("spec", ["example.com:abc", "example.com:0", "example.com:70000", "[::1", "[::1]x", ""])
    def test_invalid(self, spec):
        with pytest.raises(ResolutionOrConnectionError):
            parse_address(spec)


class TestTransportConnector:
    """TCP连接器测试类"""

    def setup_method(self):
        self.connector = TransportConnector()

    def test_connection_refused(self, closed_port):
        """测试连接被拒绝"""
        with pytest.raises(ResolutionOrConnectionError) as exc_info:
            self.connector.connect(("127.0.0.1", closed_port))

        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    @patch('ssl_expiration.services.connector.socket.getaddrinfo')
    def test_resolution_failure(self, mock_getaddrinfo):
        """测试DNS解析失败"""
        mock_getaddrinfo.side_effect = socket.gaierror(-2, "Name or service not known")

        with pytest.raises(ResolutionOrConnectionError, match="无法解析"):
            self.connector.connect("does-not-exist.invalid")

    @patch('ssl_expiration.services.connector.socket.socket')
    @patch('ssl_expiration.services.connector.socket.getaddrinfo')
    def test_first_successful_candidate_is_returned(self, mock_getaddrinfo, mock_socket):
        """测试依次尝试候选地址"""
        mock_getaddrinfo.return_value = [
            (socket.AF_INET6, socket.SOCK_STREAM, 6, '', ('2001:db8::1', 443, 0, 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, '', ('192.0.2.1', 443)),
        ]
        failing = MagicMock()
        failing.connect.side_effect = OSError("Network is unreachable")
        working = MagicMock()
        mock_socket.side_effect = [failing, working]

        sock = self.connector.connect("example.com")

        assert sock is working
        failing.close.assert_called_once()
        working.connect.assert_called_once_with(('192.0.2.1', 443))
        mock_getaddrinfo.assert_called_once_with("example.com", 443, 0, socket.SOCK_STREAM)

    @patch('ssl_expiration.services.connector.socket.socket')
    @patch('ssl_expiration.services.connector.socket.getaddrinfo')
    def test_all_candidates_fail(self, mock_getaddrinfo, mock_socket):
        """测试所有候选地址都失败"""
        mock_getaddrinfo.return_value = [
            (socket.AF_INET, socket.SOCK_STREAM, 6, '', ('192.0.2.1', 443)),
        ]
        mock_socket.return_value.connect.side_effect = OSError("No route to host")

        with pytest.raises(ResolutionOrConnectionError, match="No route to host"):
            self.connector.connect("example.com:443")

    def test_connect_local(self, plain_server):
        """测试连接本地服务器"""
        with plain_server:
            sock = self.connector.connect(f"127.0.0.1:{plain_server.port}")
            try:
                assert sock.gettimeout() is None
            finally:
                sock.close()
