"""Address and network validation for node lists and kubeadm options"""

import re

from netaddr import IPNetwork, valid_ipv4, valid_ipv6
from netaddr.core import AddrFormatError


def is_ip(ip):
    """Checks if an IP is a valid IPv4 or IPv6 address"""

    return valid_ipv4(ip) or valid_ipv6(ip)


def is_cidr(cidr):
    """Checks if ``cidr`` is a network in ``address/prefix`` notation"""

    if not isinstance(cidr, str) or "/" not in cidr:
        return False
    try:
        IPNetwork(cidr)
    except (AddrFormatError, ValueError):
        return False
    return True


def split_nodes(nodes):
    """
    Split a comma or whitespace separated string of node addresses.

    Args:
        nodes (str or list): "10.0.0.1,10.0.0.2" or ["10.0.0.1", ...]

    Returns:
        A list of addresses in the given order.

    Raises:
        ValueError if one of the items is not an IP address.
    """
    if not nodes:
        return []

    if isinstance(nodes, str):
        nodes = re.split(r"[,\s]+", nodes.strip())

    addresses = [node for node in nodes if node]
    for addr in addresses:
        if not is_ip(addr):
            raise ValueError(f"'{addr}' is not a valid IP address")

    return addresses
