"""
Decide whether this node initializes the cluster or joins it.
"""
from enum import Enum
from fnmatch import fnmatch

from kubeboot.util.util import short_hostname


class Role(Enum):
    """the part a node plays during the bootstrap"""
    INITIALIZER = "master"
    JOINER = "worker"


def select_role(nodes, hostname, master_hostname=None):
    """
    Select the role of this node.

    A non-empty list of node addresses means we are the master, the first
    address being ours. Without addresses the short host name is matched
    against ``master_hostname`` (a shell pattern, e.g. ``h0``).

    Args:
        nodes (list): node addresses given on the command line
        hostname (str): the host name of this node
        master_hostname (str): pattern of the master's short host name

    Returns:
        Role
    """
    if nodes:
        return Role.INITIALIZER

    if master_hostname and fnmatch(short_hostname(hostname), master_hostname):
        return Role.INITIALIZER

    return Role.JOINER
