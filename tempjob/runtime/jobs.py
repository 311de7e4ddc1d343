"""Per-test registry of temporary jobs with teardown."""

from __future__ import annotations

import logging
from typing import AbstractSet, List, Mapping, Optional, Tuple

from tempjob.common.models import Job
from tempjob.core.config import TemporaryJobConfig

from .builder import TemporaryJobBuilder
from .deployer import Deployer, TemporaryJob
from .errors import TeardownError


class _RecordingDeployer:
    """Forward deployments and remember every handle returned."""

    def __init__(self, deployer: Deployer, jobs: List[TemporaryJob]) -> None:
        self.deployer = deployer
        self.jobs = jobs

    def deploy(self, job: Job, hosts: List[str], wait_ports: AbstractSet[str]) -> TemporaryJob:
        handle = self.deployer.deploy(job, hosts, wait_ports)
        self.jobs.append(handle)
        return handle


class TemporaryJobs:
    """Hand out builders sharing one deployer and undeploy their jobs on close."""

    def __init__(
        self,
        deployer: Deployer,
        *,
        env: Optional[Mapping[str, str]] = None,
        config: Optional[TemporaryJobConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.env = env
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._jobs: List[TemporaryJob] = []
        self._deployer = _RecordingDeployer(deployer, self._jobs)

    @property
    def jobs(self) -> List[TemporaryJob]:
        """Handles deployed so far, in deployment order."""
        return list(self._jobs)

    def job(self) -> TemporaryJobBuilder:
        return TemporaryJobBuilder(self._deployer, env=self.env, config=self.config, logger=self.logger)

    def close(self) -> None:
        """
        Undeploy every recorded job, most recent first.

        Every job is attempted even when an earlier one fails.

        Raises:
            TeardownError: When at least one job failed to undeploy.
        """
        failures: List[Tuple[TemporaryJob, BaseException]] = []

        while self._jobs:
            handle = self._jobs.pop()
            if not isinstance(handle, TemporaryJob):
                self.logger.debug("Handle %r has no undeploy, skipping", handle)
                continue

            self.logger.info("Undeploying %s", handle)
            try:
                handle.undeploy()
            except Exception as exc:
                self.logger.error("Failed to undeploy %s: %s", handle, exc)
                failures.append((handle, exc))

        if failures:
            raise TeardownError(failures)

    def __enter__(self) -> "TemporaryJobs":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except TeardownError as teardown:
            if exc_type is None:
                raise
            # Keep the body's exception as the one the test reports.
            self.logger.error("Teardown failed while handling %s: %s", exc_type.__name__, teardown)
