"""Declarative builder for jobs deployed for the duration of a test."""

from __future__ import annotations

import logging
import os
import random
import re
import threading
from typing import Any, List, Mapping, Optional, Sequence, Set, Tuple, Union

from tempjob.common.models import JobDraft, PortMapping, ServiceEndpoint, ServicePorts
from tempjob.core.config import TemporaryJobConfig

from .deployer import Deployer, TemporaryJob
from .image_info import ImageInfoSource, parse_image_info, read_image_info_file, read_image_info_resource

JOB_NAME_FORBIDDEN_CHARS = re.compile(r"[^0-9a-zA-Z_.\-]+")

_random = threading.local()


def job_name(image: str, prefix: str = "tmp_") -> str:
    """Derive a job name from an image reference."""
    return prefix + JOB_NAME_FORBIDDEN_CHARS.sub("_", image)


def random_version() -> str:
    """
    Return a random 32-bit value in hex.

    Each thread draws from its own generator. Values are effectively unique
    across a test run but collisions are possible.
    """
    rng = getattr(_random, "rng", None)
    if rng is None:
        rng = _random.rng = random.Random()
    return format(rng.getrandbits(32), "x")


def _flatten(values: Tuple[Union[str, Sequence[str]], ...]) -> List[str]:
    # A single list/tuple argument is the sequence form of a variadic call.
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return list(values[0])
    return list(values)


class TemporaryJobBuilder:
    """
    Accumulate a job description and deploy it exactly once.

    Configuration methods return the builder so calls can be chained::

        job = (
            builder.image("redis:7")
            .port("redis", 6379)
            .env("MAXMEMORY", "64mb")
            .deploy()
        )
    """

    def __init__(
        self,
        deployer: Deployer,
        *,
        env: Optional[Mapping[str, str]] = None,
        config: Optional[TemporaryJobConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.deployer = deployer
        self.environ = env
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self.hosts: List[str] = []
        self.draft = JobDraft()
        self.wait_ports: Set[str] = set()
        self.job: Optional[TemporaryJob] = None
        self._deploy_lock = threading.Lock()

    def name(self, job_name: str) -> "TemporaryJobBuilder":
        self.draft.name = job_name
        return self

    def version(self, job_version: str) -> "TemporaryJobBuilder":
        self.draft.version = job_version
        return self

    def image(self, image: str) -> "TemporaryJobBuilder":
        self.draft.image = image
        return self

    def command(self, *command: Union[str, Sequence[str]]) -> "TemporaryJobBuilder":
        """Set the container command, given as one sequence or as separate arguments."""
        self.draft.command = _flatten(command)
        return self

    def env(self, key: str, value: Any) -> "TemporaryJobBuilder":
        self.draft.env[key] = str(value)
        return self

    def port(
        self,
        name: str,
        internal_port: int,
        external_port: Optional[int] = None,
        wait: bool = True,
    ) -> "TemporaryJobBuilder":
        """
        Map a container port.

        Args:
            name: Port name, also used to reference the port in registrations.
            internal_port: Port the container listens on.
            external_port: Requested host port; ``None`` lets the orchestrator pick one.
            wait: Whether deployment should wait for the port to accept connections.
        """
        self.draft.ports[name] = PortMapping.of(internal_port, external_port)
        if wait:
            self.wait_ports.add(name)
        else:
            self.wait_ports.discard(name)
        return self

    def registration(self, endpoint: ServiceEndpoint, ports: ServicePorts) -> "TemporaryJobBuilder":
        self.draft.registration[endpoint] = ports
        return self

    def service_registration(self, service: str, protocol: str, *ports: str) -> "TemporaryJobBuilder":
        return self.registration(ServiceEndpoint.of(service, protocol), ServicePorts.of(*ports))

    def registrations(self, registration: Mapping[ServiceEndpoint, ServicePorts]) -> "TemporaryJobBuilder":
        """Replace every registration with ``registration``."""
        self.draft.registration = dict(registration)
        return self

    def host(self, *hosts: str) -> "TemporaryJobBuilder":
        self.hosts.extend(hosts)
        return self

    def deploy(self, *hosts: Union[str, Sequence[str]]) -> TemporaryJob:
        """
        Deploy the job, or return the job deployed by an earlier call.

        Hosts given here are appended to the ones configured with ``host``.
        When no hosts are configured at all, the host filter from the
        environment (``HELIOS_HOST_FILTER``) is used if set. Arguments of
        calls made after the first deployment are ignored.

        Returns:
            The handle returned by the deployer.
        """
        with self._deploy_lock:
            if self.job is not None:
                return self.job

            settings = self._settings()
            self.hosts.extend(_flatten(hosts))

            if self.draft.name is None and self.draft.version is None:
                if self.draft.image is None:
                    self.logger.warning("Deriving job name without an image; the deployer will receive no image")
                self.draft.name = job_name(self.draft.image or "", settings.job_name_prefix)
                self.draft.version = random_version()
                self.logger.debug("Defaulted job to %s:%s", self.draft.name, self.draft.version)

            if not self.hosts and settings.host_filter:
                self.logger.debug("No hosts configured, using host filter %s", settings.host_filter)
                self.hosts = [settings.host_filter]

            job = self.draft.build()
            self.logger.info(
                "Deploying %s (%s) to %s, waiting on ports %s",
                job.job_id,
                job.image,
                self.hosts or "<no hosts>",
                sorted(self.wait_ports),
            )
            self.job = self.deployer.deploy(job, list(self.hosts), set(self.wait_ports))
            return self.job

    def image_from_build(self) -> "TemporaryJobBuilder":
        """
        Set the image from the descriptor written by the image build.

        ``IMAGE_INFO_PATH`` names the descriptor file directly; otherwise the
        resource named by ``IMAGE_INFO_NAME`` (``image_info.json`` by default)
        is looked up in the configured resource roots: the current working
        directory first, then the directories on ``sys.path``.
        """
        settings = self._settings()
        if settings.image_info_path is not None:
            return self.image_from_info_file(settings.image_info_path)
        return self.image(read_image_info_resource(settings.image_info_name, settings.resource_roots))

    def image_from_info_file(self, source: ImageInfoSource) -> "TemporaryJobBuilder":
        """Set the image from a descriptor file, given as a path or an open file."""
        return self.image(read_image_info_file(source))

    def image_from_info_json(self, json_text: str, source: str = "<json>") -> "TemporaryJobBuilder":
        return self.image(parse_image_info(json_text, source))

    def _settings(self) -> TemporaryJobConfig:
        if self.config is not None:
            return self.config
        return TemporaryJobConfig.from_env(os.environ if self.environ is None else self.environ)
