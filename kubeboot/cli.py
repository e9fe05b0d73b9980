"""
cli.py
======

misc functions preparing a node, usually called from
``kubeboot.kubeboot.Kubeboot`` or ``kubeboot.bootstrap.Bootstrap``.

Don't use directly
"""
import os
import shutil
import stat
import textwrap

from .util.logger import Logger, log_to_file
from .util.util import chown_to

LOGGER = Logger(__name__)

CLEANUP_UNIT = "k8s-cleanup.service"
SYSTEMD_DIR = "/etc/systemd/system"


def prepare_node(context, owner):
    """
    Create the shared directories and start the per-node log file.

    Args:
        context (kubeboot.config.Context): the paths
        owner (tuple): (uid, gid) of the invoking user or None

    Returns:
        the path of the log file
    """
    for path in context.directories():
        os.makedirs(path, exist_ok=True)
        chown_to(path, owner)

    log_to_file(context.log_file)
    LOGGER.debug("hostname: %s", context.hostname)
    LOGGER.debug("kubeconfig_dir: %s", context.kubeconfig_dir)
    LOGGER.debug("kubeconfig_file: %s", context.kubeconfig_file)
    LOGGER.debug("work_dir: %s", context.work_dir)
    LOGGER.debug("log_file: %s", context.log_file)
    LOGGER.debug("join_file: %s", context.join_file)
    return context.log_file


def hand_over_kubeconfig(context, executor, owner):
    """
    Copy the admin kubeconfig to the user's space and use it for every
    following kubectl call.
    """
    LOGGER.info("### cp %s %s", context.admin_conf, context.kubeconfig_file)
    shutil.copyfile(context.admin_conf, context.kubeconfig_file)
    chown_to(context.kubeconfig_file, owner)
    mode = os.stat(context.kubeconfig_file).st_mode
    os.chmod(context.kubeconfig_file, mode | stat.S_IRGRP)
    executor.setenv("KUBECONFIG", context.kubeconfig_file)


def cleanup_unit(join_file):
    """a oneshot systemd unit deleting ``join_file`` at shutdown"""
    return textwrap.dedent(f"""\
        [Unit]
        Description=Delete-{join_file}-at-shutdown
        Before=shutdown.target

        [Service]
        Type=oneshot
        RemainAfterExit=true
        ExecStart=/bin/true
        ExecStop=/bin/rm -f {join_file}

        [Install]
        WantedBy=shutdown.target
        """)


def install_cleanup_service(join_file, executor, unit_dir=SYSTEMD_DIR):
    """
    Make sure the join file disappears when the master goes down, so
    workers of the next experiment don't join a dead cluster.
    """
    path = os.path.join(unit_dir, CLEANUP_UNIT)
    with open(path, "w") as fh:
        fh.write(cleanup_unit(join_file))
    executor.run(["systemctl", "daemon-reload"])
    executor.run(["systemctl", "start", CLEANUP_UNIT])
    return path
