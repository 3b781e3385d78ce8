# Sysmenu - menu-driven Linux administration shell.
# Created: 2026-10-18

try:
    from importlib.metadata import version as _meta_version

    __version__ = _meta_version("sysmenu")
except Exception:
    __version__ = "0.1.0"
