"""
Tool catalogue

Each module registers its tools on a ServerInstance's registry.
"""

from ..core.registry import ToolRegistry
from ..core.session import SessionState
from .ai_actions import register_ai_action_tools
from .assets import register_asset_tools
from .context import register_context_tools
from .entries import register_entry_tools
from .health import register_health_tools
from .locales import register_locale_tools


def register_all_tools(registry: ToolRegistry, state: SessionState) -> None:
    register_context_tools(registry, state)
    register_health_tools(registry, state)
    register_entry_tools(registry, state)
    register_asset_tools(registry, state)
    register_locale_tools(registry, state)
    register_ai_action_tools(registry, state)


__all__ = ["register_all_tools"]
