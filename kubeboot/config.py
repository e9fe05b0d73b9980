"""
config
======

All paths and tunables shared by the bootstrap steps live in one
:class:`Context`. The defaults suit a single machine; a YAML file adapts
them to the local environment, e.g. a testbed with a shared project
directory:

.. code:: yaml

    work_dir: /proj/{proj}/exp/{exp}/tmp
    kubeconfig_dir: /proj/{proj}/exp/{exp}/k8s
    log_file: /proj/{proj}/exp/{exp}/logs/{host}.k8s.setup.log
    master_hostname: h0
    pod_network_cidr: 192.168.10.0/24
    service_cidr: 192.168.11.0/24
    use_ingress_controller: false
    cleanup_service: true

Path values may use ``{host}``, ``{exp}``, ``{proj}``, ``{home}``,
``{work_dir}`` and ``{kubeconfig_dir}``.
"""
import os
import socket

import yaml

from kubeboot import ADMIN_CONF, JOIN_FILE_NAME
from kubeboot.handoff import PARSERS
from kubeboot.testbed import hostname_parts
from kubeboot.util.net import is_cidr

CONFIG_ENV = "KUBEBOOT_CONFIG"

DEFAULTS = {
    'kubeconfig_dir': '~/.kube',
    'kubeconfig_file': '{kubeconfig_dir}/config',
    'work_dir': '~/k8s',
    'log_file': '{work_dir}/{host}.setup.log',
    'join_file': '{work_dir}/' + JOIN_FILE_NAME,
    'admin_conf': ADMIN_CONF,
    'pod_network_cidr': '10.244.0.0/16',
    'service_cidr': '',
    'use_ingress_controller': True,
    'master_hostname': '',
    'wall_command': '',
    'debug': True,
    'poll_interval': 5,
    'join_timeout': None,
    'join_parser': 'last-two-lines',
    'cleanup_service': False,
    'host_map': '',
}

# expanded in this order, later ones may refer to earlier ones
BASE_PATHS = ('work_dir', 'kubeconfig_dir')
PATHS = ('kubeconfig_file', 'log_file', 'join_file', 'admin_conf',
         'host_map')

BOOLEANS = ('use_ingress_controller', 'debug', 'cleanup_service')


class ConfigError(ValueError):
    """the configuration can't be used"""


def load_settings(path):
    """read a YAML configuration file, an empty file gives an empty dict"""
    try:
        with open(path, 'r') as stream:
            settings = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}")

    if settings is None:
        return {}
    if not isinstance(settings, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return settings


class Context:  # pylint: disable=too-many-instance-attributes
    """
    The shared configuration of one bootstrap run.

    Args:
        settings (dict): overrides for :data:`DEFAULTS`
        hostname (str): the FQDN of this node, defaults to the real one
    """

    def __init__(self, settings=None, hostname=None):
        settings = dict(settings or {})
        unknown = set(settings) - set(DEFAULTS)
        if unknown:
            raise ConfigError("unknown configuration keys: %s" %
                              ", ".join(sorted(unknown)))

        values = dict(DEFAULTS)
        values.update(settings)

        self.hostname = hostname or socket.getfqdn()
        self.fields = hostname_parts(self.hostname)
        self.fields['home'] = os.path.expanduser('~')

        for key in BASE_PATHS + PATHS:
            values[key] = self._expand(key, values[key])
            self.fields[key] = values[key]

        for key, value in values.items():
            setattr(self, key, value)

        self.validate()

    def _expand(self, key, value):
        if not value:
            return value
        try:
            value = str(value).format(**self.fields)
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigError(f"can't expand {key} '{value}': {exc}")
        return os.path.expanduser(value)

    @classmethod
    def from_file(cls, path=None, hostname=None):
        """
        Build a context from a YAML file.

        Without ``path`` the file named in ``$KUBEBOOT_CONFIG`` is used, if
        any, otherwise the defaults.
        """
        path = path or os.environ.get(CONFIG_ENV)
        settings = load_settings(path) if path else {}
        return cls(settings, hostname=hostname)

    @property
    def host(self):
        """the short host name"""
        return self.fields['host']

    def validate(self):
        """
        Check the values which are passed on to external tools.

        Raises:
            ConfigError
        """
        if not is_cidr(self.pod_network_cidr):
            raise ConfigError(
                f"pod_network_cidr '{self.pod_network_cidr}' is not a CIDR")
        if self.service_cidr and not is_cidr(self.service_cidr):
            raise ConfigError(
                f"service_cidr '{self.service_cidr}' is not a CIDR")
        for key in BOOLEANS:
            if not isinstance(getattr(self, key), bool):
                raise ConfigError(f"{key} must be true or false")
        if not isinstance(self.poll_interval, (int, float)) or \
                self.poll_interval <= 0:
            raise ConfigError("poll_interval must be a positive number")
        if self.join_timeout is not None and (
                not isinstance(self.join_timeout, (int, float)) or
                self.join_timeout < 0):
            raise ConfigError("join_timeout must be empty or >= 0")
        if self.join_parser not in PARSERS:
            raise ConfigError("join_parser must be one of: %s" %
                              ", ".join(sorted(PARSERS)))

    def directories(self):
        """directories which must exist before the bootstrap starts"""
        dirs = [os.path.dirname(os.path.abspath(self.join_file)),
                self.kubeconfig_dir,
                self.work_dir,
                os.path.dirname(os.path.abspath(self.log_file))]
        unique = []
        for path in dirs:
            if path not in unique:
                unique.append(path)
        return unique
