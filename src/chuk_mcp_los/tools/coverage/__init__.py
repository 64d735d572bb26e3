from .api import register_coverage_tools

__all__ = ["register_coverage_tools"]
