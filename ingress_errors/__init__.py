"""Custom default backend serving pre-rendered error pages for an ingress proxy."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ingress-nginx-errors")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
