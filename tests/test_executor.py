"""
tests for kubeboot.executor
"""
import pytest

from kubeboot.executor import Executor, CommandFailed, ExecutionResult

from .conftest import FakeRunner


def run_all(executor, commands):
    for cmd in commands:
        executor.run(cmd)


def test_successful_command(runner):
    executor = Executor(runner=runner)
    result = executor.run(["apt-get", "update"])

    assert isinstance(result, ExecutionResult)
    assert result.ok
    assert result.returncode == 0
    assert result.output is None
    assert runner.calls == [["apt-get", "update"]]


def test_arguments_are_strings(runner):
    Executor(runner=runner).run(["sleep", 5])
    assert runner.calls == [["sleep", "5"]]


def test_capture_output():
    runner = FakeRunner({"kubectl version": (0, "Client Version: v1.16.2\n")})
    executor = Executor(runner=runner)

    assert executor.run(["kubectl", "version"],
                        capture=True).output == "Client Version: v1.16.2\n"
    assert executor.output(["kubectl", "version"]) == \
        "Client Version: v1.16.2\n"
    # not asked for, not returned
    assert executor.run(["kubectl", "version"]).output is None


def test_fail_fast():
    runner = FakeRunner({"false": (1, "")})
    executor = Executor(runner=runner)

    with pytest.raises(CommandFailed) as err:
        run_all(executor, [["apt-get", "update"],
                           ["false"],
                           ["kubeadm", "init"]])

    assert runner.commands == ["apt-get update", "false"]
    assert err.value.result.returncode == 1
    assert err.value.result.args == ["false"]
    assert "'false' exited with 1" in str(err.value)


def test_tolerated_failure_is_returned():
    runner = FakeRunner({"grep": (1, "")})
    executor = Executor(runner=runner)

    result = executor.run(["grep", "swap", "/etc/fstab"], fail_ok=True)
    assert not result.ok
    assert result.returncode == 1

    executor.run(["swapoff", "-a"])
    assert runner.commands == ["grep swap /etc/fstab", "swapoff -a"]


def test_flags_do_not_stick():
    runner = FakeRunner({"grep": (2, "")})
    executor = Executor(runner=runner)

    executor.run(["grep", "x"], fail_ok=True, capture=True)
    assert executor.run(["grep", "x"], fail_ok=True).output is None
    with pytest.raises(CommandFailed):
        executor.run(["grep", "x"])


def test_missing_binary_fails():
    def runner(args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", args[0])

    executor = Executor(runner=runner)
    with pytest.raises(CommandFailed) as err:
        executor.run(["kubeadm", "init"])
    assert err.value.result.returncode == 127

    assert executor.run(["kubeadm", "init"], fail_ok=True).returncode == 127


def test_environment(runner):
    executor = Executor(env={"DEBIAN_FRONTEND": "noninteractive"},
                        runner=runner)
    executor.setenv("KUBECONFIG", "/home/user/.kube/config")
    executor.run(["kubectl", "get", "nodes"], env={"LANG": "C"})

    env = runner.envs[0]
    assert env["DEBIAN_FRONTEND"] == "noninteractive"
    assert env["KUBECONFIG"] == "/home/user/.kube/config"
    assert env["LANG"] == "C"


def test_quiet_executor_discards_output():
    runner = FakeRunner({"apt-get": (0, "lots of output\n")})
    executor = Executor(debug=False, runner=runner)
    assert executor.run(["apt-get", "update"]).output is None
