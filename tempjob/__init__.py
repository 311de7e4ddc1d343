"""Temporary jobs for integration tests against a cluster orchestrator."""

from .common.models import Job, JobDraft, PortMapping, ServiceEndpoint, ServicePorts
from .core.config import TemporaryJobConfig, load_config
from .runtime import (
    Deployer,
    ImageInfoError,
    TeardownError,
    TemporaryJob,
    TemporaryJobBuilder,
    TemporaryJobs,
)

__all__ = [
    "Job",
    "JobDraft",
    "PortMapping",
    "ServiceEndpoint",
    "ServicePorts",
    "TemporaryJobConfig",
    "load_config",
    "Deployer",
    "ImageInfoError",
    "TeardownError",
    "TemporaryJob",
    "TemporaryJobBuilder",
    "TemporaryJobs",
]
