"""
ToolHub - tool computations
===========================

Importing this package registers every tool module with the registry.
"""
from tools import business, design, developer, engineering, financial, marketing, text, timekeeping  # noqa: F401
from tools.catalog import CATEGORIES, PREMIUM_TOOLS, describe_tool, get_category, get_tool_category, is_premium_tool
from tools.inputs import PremiumRequiredError, premium_message
from tools.registry import ToolDefinition, ToolNotFoundError, execute_tool, get_tool, registered_slugs

__version__ = "1.0.0"

__all__ = [
    "CATEGORIES",
    "PREMIUM_TOOLS",
    "PremiumRequiredError",
    "ToolDefinition",
    "ToolNotFoundError",
    "describe_tool",
    "execute_tool",
    "get_category",
    "get_tool",
    "get_tool_category",
    "is_premium_tool",
    "premium_message",
    "registered_slugs",
]
