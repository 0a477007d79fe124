"""Command runtimes that serve ``agent.exec_cmd`` requests."""

from .local import LocalCommandRuntime

__all__ = ["LocalCommandRuntime"]
