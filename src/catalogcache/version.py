from importlib import metadata

# This variable is intended to be overwritten during the build/release process
__version__ = "dev"


def get_version() -> str:
    """
    Returns the current version of the library.
    Priorities:
    1. Explicitly set __version__ (if not "dev")
    2. Installed distribution metadata
    3. Fallback "dev"
    """
    if __version__ != "dev":
        return __version__

    try:
        return metadata.version("catalogcache")
    except metadata.PackageNotFoundError:
        pass

    return "dev"
