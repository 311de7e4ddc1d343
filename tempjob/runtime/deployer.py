"""Contracts of the collaborators that perform and undo deployments."""
from __future__ import annotations

from typing import AbstractSet, List, Protocol, runtime_checkable

from tempjob.common.models import Job


@runtime_checkable
class TemporaryJob(Protocol):
    """Handle to a deployed job."""

    def undeploy(self) -> None:
        """Remove the job from every host it was deployed to."""


class Deployer(Protocol):
    def deploy(self, job: Job, hosts: List[str], wait_ports: AbstractSet[str]) -> TemporaryJob:
        """
        Deploy ``job`` to ``hosts`` and block until every port in
        ``wait_ports`` accepts connections.
        """
