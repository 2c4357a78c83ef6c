"""
主机配置管理服务
"""
import os
import re
import ipaddress
from typing import List, Optional, Tuple
import logging

from ..errors import ResolutionOrConnectionError
from .connector import parse_address


class HostConfigManager:
    """主机配置管理器

    主机列表优先取命令行参数，没有参数时从环境变量读取（逗号分隔）。
    """

    def __init__(self, env_var_name: str = "HOSTS"):
        """
        初始化主机配置管理器

        Args:
            env_var_name: 环境变量名称，默认为"HOSTS"
        """
        self.env_var_name = env_var_name
        self.logger = logging.getLogger(__name__)

        # 域名格式验证正则表达式
        self.domain_pattern = re.compile(
            r'^(?:[a-zA-Z0-9_](?:[a-zA-Z0-9_-]{0,61}[a-zA-Z0-9])?\.)*[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.?$'
        )

    def get_host_entries(self, args: Optional[List[str]] = None) -> List[Tuple[str, bool]]:
        """
        获取主机列表

        无效主机不会被丢弃，而是带上无效标记返回，由调用方逐个报告。

        Args:
            args: 命令行传入的主机

        Returns:
            List[Tuple[str, bool]]: (主机, 是否有效)，保持输入顺序。
                有效主机为清理后的形式，无效主机保留原始输入
        """
        if args:
            raw_hosts = list(args)
        else:
            hosts_str = os.getenv(self.env_var_name, "")
            if not hosts_str.strip():
                self.logger.info(f"没有传入主机参数，环境变量 {self.env_var_name} 也为空")
                return []
            raw_hosts = hosts_str.split(',')

        entries = []
        for raw_host in raw_hosts:
            if not raw_host.strip():
                continue

            host = self.clean_host(raw_host)
            if self.validate_host(host):
                entries.append((host, True))
            else:
                self.logger.info(f"无效主机: {raw_host}")
                entries.append((raw_host.strip(), False))

        self.logger.info(f"加载 {len(entries)} 个主机，其中有效 {len([e for e in entries if e[1]])} 个")
        return entries

    def clean_host(self, host: str) -> str:
        """
        清理主机格式，保留端口

        Args:
            host: 原始主机

        Returns:
            str: 清理后的主机
        """
        host = host.strip()

        # 移除协议前缀
        if host.startswith('https://'):
            host = host[8:]
        elif host.startswith('http://'):
            host = host[7:]

        # 移除路径部分
        if '/' in host:
            host = host.split('/')[0]

        return host.lower()

    def validate_host(self, host: str) -> bool:
        """
        验证主机格式

        Args:
            host: ``host``、``host:port`` 或 ``[ipv6]:port``

        Returns:
            bool: 主机是否有效
        """
        if not host or not isinstance(host, str):
            return False

        try:
            name, _ = parse_address(host)
        except ResolutionOrConnectionError:
            return False

        if len(name) > 253:
            return False

        try:
            ipaddress.ip_address(name)
            return True
        except ValueError:
            pass

        return bool(self.domain_pattern.match(name))

    def has_explicit_port(self, host: str) -> bool:
        """判断主机是否显式指定了端口"""
        if host.startswith('['):
            return ']:' in host
        return host.count(':') == 1
