# pylint: disable=missing-docstring
try:
    from importlib.metadata import version, PackageNotFoundError
    __version__ = version('kubeboot')
except PackageNotFoundError:
    __version__ = '0.3.0'

# Defining some constants
JOIN_FILE_NAME = "nodeJoinFile"
ADMIN_CONF = "/etc/kubernetes/admin.conf"

WEAVE_URL = "https://cloud.weave.works/k8s/net?k8s-version={}"
METALLB_URL = ("https://raw.githubusercontent.com/google/metallb/"
               "v0.8.1/manifests/metallb.yaml")
INGRESS_NGINX_URL = ("https://raw.githubusercontent.com/kubernetes/"
                     "ingress-nginx/master/deploy/static/mandatory.yaml")
INGRESS_NODEPORT_URL = ("https://raw.githubusercontent.com/kubernetes/"
                        "ingress-nginx/master/deploy/static/provider/"
                        "baremetal/service-nodeport.yaml")

MASTER_TAINTS = ("node-role.kubernetes.io/master",
                 "node-role.kubernetes.io/control-plane")
