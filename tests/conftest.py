"""
测试公共夹具
"""
import ipaddress
import socket
import ssl
import threading
from datetime import datetime, timezone, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def make_certificate(not_after, not_before=None, general_names=None, common_name="test.example",
                     issuer=None):
    """生成证书，返回 (证书, 私钥)

    issuer 为 (颁发者证书, 颁发者私钥) 时由其签名，否则自签名。
    """
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer_name, signing_key = (issuer[0].subject, issuer[1]) if issuer else (name, key)

    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or min(not_after, datetime.now(timezone.utc)) - timedelta(days=30))
        .not_valid_after(not_after)
    )
    if general_names is not None:
        builder = builder.add_extension(x509.SubjectAlternativeName(general_names), critical=False)

    return builder.sign(signing_key, hashes.SHA256()), key


def to_der(cert) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


def whole_seconds(dt: datetime) -> datetime:
    return dt.replace(microsecond=0)


class LocalServer:
    """在后台线程中运行的单连接测试服务器"""

    def __init__(self, handler):
        self.handler = handler
        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.listener.bind(("127.0.0.1", 0))
        self.listener.listen(1)
        self.listener.settimeout(10)
        self.port = self.listener.getsockname()[1]
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        try:
            conn, _ = self.listener.accept()
        except OSError:
            return
        conn.settimeout(10)
        try:
            self.handler(conn)
        except OSError:
            pass
        finally:
            conn.close()

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc_info):
        self.thread.join(timeout=10)
        self.listener.close()


@pytest.fixture
def tls_server(tmp_path):
    """返回一个工厂：用给定证书启动TLS服务器"""

    def start(cert, key):
        certfile = tmp_path / "cert.pem"
        keyfile = tmp_path / "key.pem"
        certfile.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
        keyfile.write_bytes(key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption()
        ))

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(str(certfile), str(keyfile))

        def handler(conn):
            with context.wrap_socket(conn, server_side=True) as tls_conn:
                # 等待客户端关闭连接
                tls_conn.recv(1)

        return LocalServer(handler)

    return start


@pytest.fixture
def plain_server():
    """接受TCP连接但不说TLS的服务器"""

    def handler(conn):
        conn.recv(1024)
        conn.sendall(b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n")

    return LocalServer(handler)


@pytest.fixture
def closed_port():
    """一个当前没有监听的本地端口"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def ip(value):
    return ipaddress.ip_address(value)
