"""Shared fixtures for temporary job tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Tuple

import pytest

from tempjob.common.models import Job


@dataclass
class FakeJob:
    """Deployed-job handle recording its own teardown."""

    job: Job
    hosts: List[str]
    wait_ports: AbstractSet[str]
    undeployed: bool = False
    error: Optional[Exception] = None

    def undeploy(self) -> None:
        if self.error is not None:
            raise self.error
        self.undeployed = True


@dataclass
class RecordingDeployer:
    """Deployer double capturing every call it receives."""

    calls: List[Tuple[Job, List[str], AbstractSet[str]]] = field(default_factory=list)
    error: Optional[Exception] = None

    def deploy(self, job: Job, hosts: List[str], wait_ports: AbstractSet[str]) -> FakeJob:
        self.calls.append((job, hosts, wait_ports))
        if self.error is not None:
            raise self.error
        return FakeJob(job=job, hosts=hosts, wait_ports=wait_ports)

    @property
    def last_job(self) -> Job:
        return self.calls[-1][0]

    @property
    def last_hosts(self) -> List[str]:
        return self.calls[-1][1]

    @property
    def last_wait_ports(self) -> AbstractSet[str]:
        return self.calls[-1][2]


@pytest.fixture
def deployer() -> RecordingDeployer:
    return RecordingDeployer()
