"""Single source of truth for the APIDL version."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version


def get_version() -> str:
    """Get the installed distribution version, or a placeholder when running from source."""
    try:
        return _metadata_version("apidl")
    except PackageNotFoundError:
        return "0.0.0"
