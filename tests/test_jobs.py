"""Tests for the temporary job registry and its teardown."""

from __future__ import annotations

import pytest

from tempjob.runtime.errors import TeardownError
from tempjob.runtime.jobs import TemporaryJobs


def test_builders_share_deployer_and_record_handles(deployer) -> None:
    jobs = TemporaryJobs(deployer, env={"HELIOS_HOST_FILTER": "h1"})

    first = jobs.job().image("redis:7").deploy()
    second = jobs.job().image("busybox").name("sidecar").version("1").deploy()

    assert jobs.jobs == [first, second]
    assert [call[1] for call in deployer.calls] == [["h1"], ["h1"]]


def test_repeated_deploy_records_handle_once(deployer) -> None:
    jobs = TemporaryJobs(deployer, env={})
    builder = jobs.job().image("busybox")

    builder.deploy()
    builder.deploy()

    assert len(jobs.jobs) == 1


def test_close_undeploys_in_reverse_order(deployer) -> None:
    order = []
    jobs = TemporaryJobs(deployer, env={})
    handles = [jobs.job().image(f"img-{idx}").deploy() for idx in range(3)]
    for handle in handles:
        original = handle.undeploy
        handle.undeploy = lambda handle=handle, original=original: (order.append(handle.job.image), original())

    jobs.close()

    assert order == ["img-2", "img-1", "img-0"]
    assert all(handle.undeployed for handle in handles)
    assert jobs.jobs == []


def test_close_attempts_every_job_and_reports_failures(deployer) -> None:
    jobs = TemporaryJobs(deployer, env={})
    failing = jobs.job().image("failing").deploy()
    healthy = jobs.job().image("healthy").deploy()
    failing.error = RuntimeError("host unreachable")

    with pytest.raises(TeardownError, match="host unreachable") as excinfo:
        jobs.close()

    assert healthy.undeployed
    assert [job for job, _ in excinfo.value.failures] == [failing]

    # Failed handles are not retried.
    jobs.close()


def test_context_manager_tears_down(deployer) -> None:
    with TemporaryJobs(deployer, env={}) as jobs:
        handle = jobs.job().image("busybox").deploy()

    assert handle.undeployed


def test_failed_deployments_are_not_recorded(deployer) -> None:
    deployer.error = RuntimeError("boom")
    jobs = TemporaryJobs(deployer, env={})

    with pytest.raises(RuntimeError):
        jobs.job().image("busybox").deploy()

    assert jobs.jobs == []


def test_context_manager_keeps_body_exception_when_teardown_fails(deployer) -> None:
    with pytest.raises(ValueError, match="assertion in test body"):
        with TemporaryJobs(deployer, env={}) as jobs:
            handle = jobs.job().image("busybox").deploy()
            handle.error = RuntimeError("host unreachable")
            raise ValueError("assertion in test body")

    assert jobs.jobs == []


def test_context_manager_raises_teardown_error_after_clean_body(deployer) -> None:
    with pytest.raises(TeardownError, match="host unreachable"):
        with TemporaryJobs(deployer, env={}) as jobs:
            handle = jobs.job().image("busybox").deploy()
            handle.error = RuntimeError("host unreachable")
