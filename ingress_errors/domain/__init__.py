"""Pure domain utilities: header signals and template names.

These modules are intentionally free of FastAPI/HTTP concerns so they can be
unit-tested without a server or a filesystem.
"""
__all__ = ["signals"]
