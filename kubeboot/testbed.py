"""
Conventions of emulated testbeds (Emulab and friends).

Host names look like ``h0.<experiment>.<project>.<domain>`` and the
shared project space is mounted under ``/proj/<project>/exp/<experiment>``.
The boot directory has an ``ltpmap`` listing the hosts of the experiment.
"""
import socket

from kubeboot.util.logger import Logger

LOGGER = Logger(__name__)

HOST_TYPE = "H"


def hostname_parts(hostname):
    """
    split a testbed FQDN into host, experiment and project

    Missing parts are returned as empty strings.

    >>> hostname_parts("h0.k8s.myproj.emulab.net")
    {'host': 'h0', 'exp': 'k8s', 'proj': 'myproj'}
    """
    labels = hostname.split(".") + ["", "", ""]
    return {'host': labels[0], 'exp': labels[1], 'proj': labels[2]}


def parse_host_map(lines):
    """
    return the host names of all ``H`` entries of a host map

    Each line reads ``<type> <nickname> <hostname> ...``.
    """
    hosts = []
    for line in lines:
        fields = line.split()
        if len(fields) < 3 or fields[0] != HOST_TYPE:
            continue
        hosts.append(fields[2])
    return hosts


def discover_nodes(path, resolve=socket.gethostbyname):
    """
    Read the host map at ``path`` and resolve every host to an address.

    Returns:
        list of IP addresses, in the order of the host map
    """
    with open(path, "r") as fh:
        hosts = parse_host_map(fh)

    nodes = []
    for host in hosts:
        addr = resolve(host)
        LOGGER.debug("%s has address %s", host, addr)
        nodes.append(addr)
    return nodes
