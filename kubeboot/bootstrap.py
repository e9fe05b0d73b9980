"""
bootstrap
=========

Set up one node of a kubeadm cluster, either the master or a worker.

The master runs ``kubeadm init`` and publishes its output in the join
file. Workers wait for that file, take the ``kubeadm join`` command from
it and run it. Both can run at the same time on all nodes when the join
file lives on a file system they share; otherwise copy the file from the
master to the worker before running the worker.
"""
import shlex
import time

from kubeboot.cli import hand_over_kubeconfig, install_cleanup_service
from kubeboot.deploy.k8s import AddOnConfigurator, Exposure
from kubeboot.handoff import (JoinFile, JoinFileWatcher, get_parser,
                              extract_join_command)
from kubeboot.role import Role, select_role
from kubeboot.testbed import discover_nodes
from kubeboot.util.logger import Logger

LOGGER = Logger(__name__)

VERBOSITY = "--v=5"


class MasterInitializer:
    """
    Run ``kubeadm init`` once and publish the output for the workers.

    Args:
        executor (kubeboot.executor.Executor)
        join_file (kubeboot.handoff.JoinFile)
        parser: the join command parser the workers will use
    """

    def __init__(self, executor, join_file, parser=None):
        self.executor = executor
        self.join_file = join_file
        self.parser = parser

    def initialize(self, pod_network_cidr, service_cidr=""):
        """
        Initialize the control plane.

        A join file left over from an earlier run is deleted first. A
        failing ``kubeadm init`` ends the bootstrap, there is no cluster
        to join then.

        Returns:
            str: the captured output, as written to the join file

        Raises:
            kubeboot.executor.CommandFailed
            kubeboot.handoff.JoinCommandNotFound if the output has no
                join command, the file is not written then.
        """
        self.join_file.remove()

        args = ["kubeadm", "init", f"--pod-network-cidr={pod_network_cidr}"]
        if service_cidr:
            args.append(f"--service-cidr={service_cidr}")
        args.append(VERBOSITY)

        output = self.executor.output(args)
        command = extract_join_command(output, self.parser)
        LOGGER.debug("workers will run: %s", command)

        self.join_file.publish(output)
        return output


class Bootstrap:
    """
    The role dependent control flow of a node.

    Args:
        context (kubeboot.config.Context)
        executor (kubeboot.executor.Executor)
        owner (tuple): (uid, gid) owning the created files, or None
        configurator: an :class:`kubeboot.deploy.k8s.AddOnConfigurator`
        sleep: the sleep function of the join file watcher
    """

    def __init__(self, context, executor, owner=None, configurator=None,
                 sleep=time.sleep):
        self.context = context
        self.executor = executor
        self.owner = owner
        self.configurator = configurator or AddOnConfigurator(context,
                                                              executor)
        self.sleep = sleep
        self.join_file = JoinFile(context.join_file)
        self.parser = get_parser(context.join_parser)

    @property
    def exposure(self):
        """ingress controller or load balancer"""
        if self.context.use_ingress_controller:
            return Exposure.INGRESS_CONTROLLER
        return Exposure.LOAD_BALANCER

    def run(self, nodes=None):
        """
        Set up this node.

        Args:
            nodes (list): node addresses, the master's first. Given only
                on the master.

        Returns:
            Role: the role this node played
        """
        nodes = list(nodes or [])
        role = select_role(nodes, self.context.hostname,
                           self.context.master_hostname)

        LOGGER.info("k8s setup start on %s node", role.value.upper())
        if role is Role.INITIALIZER:
            self.run_master(nodes)
        else:
            self.run_worker()

        LOGGER.success("k8s setup finished on %s node", role.value.upper())
        return role

    def run_master(self, nodes):
        """init the cluster, hand over the join command, apply add-ons"""
        if not nodes and self.context.host_map:
            nodes = discover_nodes(self.context.host_map)
            LOGGER.info("Nodes from %s: %s", self.context.host_map,
                        ", ".join(nodes))

        LOGGER.info("number of nodes: %d", len(nodes))

        if self.context.cleanup_service:
            install_cleanup_service(self.context.join_file, self.executor)

        self.executor.run(["swapoff", "-a"])

        MasterInitializer(self.executor, self.join_file, self.parser)\
            .initialize(self.context.pod_network_cidr,
                        self.context.service_cidr)

        hand_over_kubeconfig(self.context, self.executor, self.owner)
        self.configurator.configure(self.exposure, nodes)

        if self.context.wall_command:
            self.executor.run(shlex.split(self.context.wall_command))

    def join_command(self):
        """the join command of the current join file"""
        return extract_join_command(self.join_file.read(), self.parser)

    def run_worker(self):
        """wait for the master's join file and join the cluster"""
        self.executor.run(["swapoff", "-a"])

        JoinFileWatcher(self.join_file,
                        interval=self.context.poll_interval,
                        timeout=self.context.join_timeout,
                        sleep=self.sleep).wait()

        command = self.join_command()
        self.executor.run(shlex.split(command) + [VERBOSITY])
