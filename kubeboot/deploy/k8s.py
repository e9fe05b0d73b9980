"""
configure a freshly initialized cluster: pod network, ingress controller
or load balancer, and the master taint of single node clusters
"""
import base64
import os
from enum import Enum
from urllib.request import urlopen

import yaml

from kubernetes import client as k8sclient
from kubernetes.config import kube_config

from kubeboot import (WEAVE_URL, METALLB_URL, INGRESS_NGINX_URL,
                      INGRESS_NODEPORT_URL, MASTER_TAINTS)
from kubeboot.util.logger import Logger

LOGGER = Logger(__name__)

FETCH_TIMEOUT = 60


class Exposure(Enum):
    """how services are reachable from outside the cluster"""
    INGRESS_CONTROLLER = "ingress-controller"
    LOAD_BALANCER = "load-balancer"


def fetch_url(url):
    """download a manifest and return it as text"""
    with urlopen(url, timeout=FETCH_TIMEOUT) as resp:
        return resp.read().decode("utf-8")


def weave_url(kubectl_version):
    """
    the weave net manifest URL for the cluster's kubectl version output
    """
    token = base64.b64encode(kubectl_version.encode()).decode()
    return WEAVE_URL.format(token.replace("\n", ""))


def metallb_config(nodes):
    """
    The MetalLB configuration with a layer2 address pool.

    Only the master's address is used, so every service is reached via
    the master IP and its own port.

    Args:
        nodes (list): node addresses, the first being the master's

    Returns:
        dict: a ConfigMap for ``metallb-system``
    """
    addresses = ["%s/32" % nodes[0]] if nodes else []
    pools = {'address-pools': [{
        'name': 'default',
        'protocol': 'layer2',
        'addresses': addresses}]}

    return {'apiVersion': 'v1',
            'kind': 'ConfigMap',
            'metadata': {'namespace': 'metallb-system', 'name': 'config'},
            'data': {'config': yaml.safe_dump(pools,
                                              default_flow_style=False)}}


def patch_ingress_manifest(text):
    """
    Run the ingress-nginx controller as DaemonSet on the host network.

    The first ``Deployment`` of the multi document manifest becomes a
    ``DaemonSet`` with ``hostNetwork: true``, so every node serves as an
    entry point. ``spec.replicas`` is dropped, kubectl warns about it
    otherwise.

    Args:
        text (str): the upstream ``mandatory.yaml``

    Returns:
        str: the modified manifest
    """
    docs = [doc for doc in yaml.safe_load_all(text) if doc]
    for doc in docs:
        if doc.get('kind') == 'Deployment':
            break
    else:
        raise ValueError("no Deployment found in ingress manifest")

    doc['kind'] = 'DaemonSet'
    spec = doc.setdefault('spec', {})
    spec.pop('replicas', None)
    pod_spec = spec.setdefault('template', {}).setdefault('spec', {})
    pod_spec['hostNetwork'] = True

    return yaml.safe_dump_all(docs, default_flow_style=False)


class K8S:
    """Talk to the cluster via the API server.

    Args:
        config (str): File path for the kubernetes configuration file
    """

    def __init__(self, config):
        self.config = config
        kube_config.load_kube_config(config_file=config)
        self.api = k8sclient.CoreV1Api()

    def untaint_masters(self, keys=MASTER_TAINTS):
        """
        Remove the master taints so pods can be scheduled on masters.

        Returns:
            list of the names of the nodes which were patched
        """
        patched = []
        for node in self.api.list_node().items:
            taints = node.spec.taints or []
            keep = [t for t in taints if t.key not in keys]
            if len(keep) == len(taints):
                continue

            body = {'spec': {'taints': [
                {'key': t.key, 'value': t.value, 'effect': t.effect}
                for t in keep]}}
            self.api.patch_node(node.metadata.name, body)
            LOGGER.info("Removed master taint from %s", node.metadata.name)
            patched.append(node.metadata.name)
        return patched


class AddOnConfigurator:
    """
    Apply the add-ons after ``kubeadm init`` on the master.

    Args:
        context (kubeboot.config.Context): paths and options
        executor (kubeboot.executor.Executor): runs kubectl
        k8s_factory: callable creating a :class:`K8S` from a kubeconfig path
        fetch: callable returning the text behind a URL
    """

    def __init__(self, context, executor, k8s_factory=K8S, fetch=fetch_url):
        self.context = context
        self.executor = executor
        self.k8s_factory = k8s_factory
        self.fetch = fetch

    def _path(self, name):
        return os.path.join(self.context.work_dir, name)

    def kubectl_apply(self, manifest):
        """apply a file or URL"""
        return self.executor.run(["kubectl", "apply", "-f", manifest])

    def apply_network(self):
        """apply the weave net pod network add-on"""
        version = self.executor.output(["kubectl", "version"])
        self.kubectl_apply(weave_url(version))

    def remove_master_taint(self):
        """let the only node of the cluster run workloads"""
        k8s = self.k8s_factory(self.context.kubeconfig_file)
        return k8s.untaint_masters()

    def configure_ingress_controller(self):
        """deploy ingress-nginx as DaemonSet with a NodePort service"""
        LOGGER.info("config ingress controller")
        original = self._path("mandatory.yaml")
        modified = self._path("mandatory_modified.yaml")

        text = self.fetch(INGRESS_NGINX_URL)
        with open(original, "w") as fh:
            fh.write(text)
        with open(modified, "w") as fh:
            fh.write(patch_ingress_manifest(text))

        self.kubectl_apply(modified)
        self.kubectl_apply(INGRESS_NODEPORT_URL)

    def configure_load_balancer(self, nodes):
        """deploy MetalLB with the master's address as pool"""
        LOGGER.info("config load balancer")
        if not nodes:
            LOGGER.warning("No node addresses known, the address pool "
                           "stays empty")
        self.kubectl_apply(METALLB_URL)

        path = self._path("metallbConfig.yaml")
        with open(path, "w") as fh:
            yaml.safe_dump(metallb_config(nodes), fh, default_flow_style=False)
        self.kubectl_apply(path)

    def configure(self, mode, nodes):
        """
        Apply everything in the order the cluster needs it.

        Args:
            mode (Exposure): ingress controller or load balancer
            nodes (list): all node addresses, the master's first
        """
        self.apply_network()

        if len(nodes) == 1:
            self.remove_master_taint()

        if mode is Exposure.INGRESS_CONTROLLER:
            self.configure_ingress_controller()
        else:
            self.configure_load_balancer(nodes)
