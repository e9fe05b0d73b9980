"""
tests for kubeboot.config
"""
import os

import pytest

from kubeboot.config import Context, ConfigError, DEFAULTS, load_settings

HOSTNAME = "h1.k8s.myproj.emulab.net"

TESTBED_CONFIG = """
master_hostname: h0
work_dir: /proj/{proj}/exp/{exp}/tmp
kubeconfig_dir: /proj/{proj}/exp/{exp}/k8s
log_file: /proj/{proj}/exp/{exp}/logs/{host}.k8s.setup.log
pod_network_cidr: 192.168.10.0/24
service_cidr: 192.168.11.0/24
use_ingress_controller: false
"""


def test_defaults():
    ctx = Context(hostname=HOSTNAME)
    home = os.path.expanduser("~")

    assert ctx.host == "h1"
    assert ctx.work_dir == os.path.join(home, "k8s")
    assert ctx.kubeconfig_dir == os.path.join(home, ".kube")
    assert ctx.kubeconfig_file == os.path.join(home, ".kube", "config")
    assert ctx.log_file == os.path.join(home, "k8s", "h1.setup.log")
    assert ctx.join_file == os.path.join(home, "k8s", "nodeJoinFile")
    assert ctx.admin_conf == "/etc/kubernetes/admin.conf"
    assert ctx.use_ingress_controller is True
    assert ctx.join_timeout is None
    assert ctx.poll_interval == 5
    assert ctx.join_parser == "last-two-lines"


def test_testbed_paths(tmp_path):
    path = tmp_path / "testbed.yml"
    path.write_text(TESTBED_CONFIG)

    ctx = Context.from_file(str(path), hostname=HOSTNAME)

    assert ctx.master_hostname == "h0"
    assert ctx.work_dir == "/proj/myproj/exp/k8s/tmp"
    assert ctx.join_file == "/proj/myproj/exp/k8s/tmp/nodeJoinFile"
    assert ctx.kubeconfig_file == "/proj/myproj/exp/k8s/k8s/config"
    assert ctx.log_file == "/proj/myproj/exp/k8s/logs/h1.k8s.setup.log"
    assert ctx.use_ingress_controller is False


def test_config_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "local.yml"
    path.write_text("join_timeout: 600\n")
    monkeypatch.setenv("KUBEBOOT_CONFIG", str(path))

    assert Context.from_file(hostname=HOSTNAME).join_timeout == 600


def test_no_config_file(monkeypatch):
    monkeypatch.delenv("KUBEBOOT_CONFIG", raising=False)
    ctx = Context.from_file(hostname=HOSTNAME)
    assert ctx.pod_network_cidr == DEFAULTS['pod_network_cidr']


def test_empty_config_file(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert load_settings(str(path)) == {}


def test_invalid_config_file(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError):
        load_settings(str(path))

    path.write_text("work_dir: [unclosed\n")
    with pytest.raises(ConfigError):
        load_settings(str(path))


@pytest.mark.parametrize("settings", [
    {'unknown_key': 1},
    {'pod_network_cidr': '10.244.0.0'},
    {'pod_network_cidr': 'not-a-network/16'},
    {'service_cidr': '10.96.0.0/99'},
    {'poll_interval': 0},
    {'poll_interval': 'often'},
    {'join_timeout': -1},
    {'join_parser': 'regex'},
    {'work_dir': '/proj/{project}/tmp'},
    {'use_ingress_controller': 'false'},
    {'debug': 'yes'},
    {'cleanup_service': 1},
])
def test_invalid_settings(settings):
    with pytest.raises(ConfigError):
        Context(settings, hostname=HOSTNAME)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)


def test_directories(tmp_path):
    ctx = Context({'work_dir': str(tmp_path / "k8s"),
                   'kubeconfig_dir': str(tmp_path / "kube")},
                  hostname=HOSTNAME)
    assert ctx.directories() == [str(tmp_path / "k8s"), str(tmp_path / "kube")]


def test_quoted_boolean_in_yaml(tmp_path):
    path = tmp_path / "testbed.yml"
    path.write_text('use_ingress_controller: "false"\n')
    with pytest.raises(ConfigError, match="use_ingress_controller"):
        Context.from_file(str(path), hostname=HOSTNAME)

    path.write_text('use_ingress_controller: false\n')
    ctx = Context.from_file(str(path), hostname=HOSTNAME)
    assert ctx.use_ingress_controller is False
