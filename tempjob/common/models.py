"""Job descriptor value objects shared by the builder and deployers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True, slots=True)
class PortMapping:
    """Container port plus the externally requested port, if any."""

    internal_port: int
    external_port: Optional[int] = None  # None lets the orchestrator choose

    @classmethod
    def of(cls, internal_port: int, external_port: Optional[int] = None) -> "PortMapping":
        return cls(internal_port=internal_port, external_port=external_port)


@dataclass(frozen=True, slots=True)
class ServiceEndpoint:
    """Service name and protocol a job registers under."""

    name: str
    protocol: str = "http"

    @classmethod
    def of(cls, name: str, protocol: str = "http") -> "ServiceEndpoint":
        return cls(name=name, protocol=protocol)

    def __str__(self) -> str:
        return f"{self.name}/{self.protocol}"


@dataclass(frozen=True, slots=True)
class ServicePorts:
    """Names of the job ports exposed through a service registration."""

    ports: Tuple[str, ...] = ()

    @classmethod
    def of(cls, *ports: str) -> "ServicePorts":
        return cls(ports=tuple(ports))


@dataclass(frozen=True, slots=True)
class Job:
    """Immutable description of a deployable workload."""

    name: Optional[str]
    version: Optional[str]
    image: Optional[str]
    command: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    ports: Mapping[str, PortMapping] = field(default_factory=dict)
    registration: Mapping[ServiceEndpoint, ServicePorts] = field(default_factory=dict)

    @property
    def job_id(self) -> str:
        """Return the ``name:version`` identifier used by deployers and logs."""
        return f"{self.name}:{self.version}"


@dataclass
class JobDraft:
    """
    Mutable, in-progress job descriptor.

    Every field may be changed freely until ``build`` is called; the
    resulting ``Job`` holds copies of all containers, so later edits to the
    draft never leak into a job that was already built.
    """

    name: Optional[str] = None
    version: Optional[str] = None
    image: Optional[str] = None
    command: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    ports: Dict[str, PortMapping] = field(default_factory=dict)
    registration: Dict[ServiceEndpoint, ServicePorts] = field(default_factory=dict)

    def build(self) -> Job:
        return Job(
            name=self.name,
            version=self.version,
            image=self.image,
            command=tuple(self.command),
            env=dict(self.env),
            ports=dict(self.ports),
            registration=dict(self.registration),
        )
