from importlib import metadata
try:
    __version__ = metadata.version("podcast-desktop-client")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0"
