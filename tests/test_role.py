from kubeboot.role import Role, select_role


def test_nodes_make_a_master():
    assert select_role(["10.0.0.1"], "node-7") is Role.INITIALIZER
    assert select_role(["10.0.0.1", "10.0.0.2"], "h3.k8s.proj",
                       "h0") is Role.INITIALIZER


def test_master_by_hostname():
    assert select_role([], "h0.k8s.myproj.emulab.net",
                       "h0") is Role.INITIALIZER
    assert select_role([], "h1.k8s.myproj.emulab.net", "h0") is Role.JOINER


def test_master_hostname_pattern():
    assert select_role([], "master-1", "master-*") is Role.INITIALIZER
    assert select_role([], "worker-1", "master-*") is Role.JOINER


def test_worker_by_default():
    assert select_role([], "h0.k8s.myproj.emulab.net") is Role.JOINER
    assert select_role(None, "h0", "") is Role.JOINER
