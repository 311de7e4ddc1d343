"""Builders and registries for jobs deployed during integration tests."""

from .builder import TemporaryJobBuilder, job_name, random_version
from .deployer import Deployer, TemporaryJob
from .errors import ImageInfoError, TeardownError
from .image_info import ImageInfo, parse_image_info
from .jobs import TemporaryJobs

__all__ = [
    "TemporaryJobBuilder",
    "job_name",
    "random_version",
    "Deployer",
    "TemporaryJob",
    "ImageInfoError",
    "TeardownError",
    "ImageInfo",
    "parse_image_info",
    "TemporaryJobs",
]
