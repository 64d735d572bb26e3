from .api import register_grid_tools

__all__ = ["register_grid_tools"]
