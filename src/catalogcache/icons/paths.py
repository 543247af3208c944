from typing import Optional


def convert_icon_path(icon_path: Optional[str]) -> Optional[str]:
    """Map a cached icon location to something a renderer can load.

    URLs, data URIs and local paths are all loadable as stored, so only empty
    values are folded to ``None``.
    """
    return icon_path or None
