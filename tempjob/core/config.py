import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

HOST_FILTER_ENV = "HELIOS_HOST_FILTER"
IMAGE_INFO_PATH_ENV = "IMAGE_INFO_PATH"
IMAGE_INFO_NAME_ENV = "IMAGE_INFO_NAME"
DEFAULT_IMAGE_INFO_NAME = "image_info.json"


def default_resource_roots() -> List[Path]:
    """Current directory first, then every directory on the import path."""
    roots = [Path.cwd()]
    for entry in sys.path:
        root = Path(entry).resolve() if entry else Path.cwd()
        if root.is_dir() and root not in roots:
            roots.append(root)
    return roots


class TemporaryJobConfig(BaseModel):
    """Settings consulted by temporary job builders at deploy time."""

    # Deployment targets
    host_filter: Optional[str] = Field(
        default=None,
        description="Host to deploy to when no hosts were configured explicitly.",
    )

    # Image info settings
    image_info_path: Optional[str] = Field(
        default=None,
        description="Filesystem path of the JSON image descriptor written by the image build.",
    )
    image_info_name: str = Field(
        default=DEFAULT_IMAGE_INFO_NAME,
        description="Resource name of the image descriptor, used when no path is set.",
    )
    resource_roots: List[Path] = Field(
        default_factory=default_resource_roots,
        description="Directories searched, in order, for image descriptor resources.",
    )

    # Naming
    job_name_prefix: str = "tmp_"

    @classmethod
    def from_env(cls, env: Mapping[str, str], **overrides) -> "TemporaryJobConfig":
        """
        Build a config from an environment mapping.

        Args:
            env: Mapping to read variables from (``os.environ`` or a test double).
            overrides: Field values taking precedence over the environment.

        Blank variables are treated as unset.
        """
        values = {
            "host_filter": env.get(HOST_FILTER_ENV) or None,
            "image_info_path": env.get(IMAGE_INFO_PATH_ENV) or None,
        }
        image_info_name = env.get(IMAGE_INFO_NAME_ENV)
        if image_info_name:
            values["image_info_name"] = image_info_name
        values.update(overrides)
        return cls(**values)


def load_config(env_file: Optional[str] = None, **overrides) -> TemporaryJobConfig:
    """Load ``.env`` values into the process environment and read the config from it."""
    load_dotenv(env_file)
    return TemporaryJobConfig.from_env(os.environ, **overrides)
