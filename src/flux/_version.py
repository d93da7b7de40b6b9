"""Package version, from the checkout's pyproject.toml or installed metadata."""

import tomllib
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "flux-expr"

# src/flux/_version.py -> repository root
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    if _PYPROJECT.is_file():
        with open(_PYPROJECT, "rb") as f:
            project = tomllib.load(f).get("project", {})
        if "version" in project:
            return str(project["version"])
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"
