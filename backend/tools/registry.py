"""Tool registry.

Each computation module registers its functions with @register. A tool
function takes the raw inputs dict and whether the caller has premium access,
and returns a JSON-serialisable result dict. Coroutine functions are awaited.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple
import inspect
import logging

logger = logging.getLogger(__name__)


class ToolNotFoundError(LookupError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Tool '{slug}' not found")


@dataclass
class ToolDefinition:
    slug: str
    compute: Callable[..., Any]
    exports: Tuple[str, ...] = field(default_factory=tuple)
    # Business documents render with a dedicated PDF layout
    document: Optional[str] = None


_REGISTRY: Dict[str, ToolDefinition] = {}


def register(slug: str, exports=(), document: Optional[str] = None):
    def decorator(func):
        if slug in _REGISTRY:
            raise RuntimeError(f"Tool '{slug}' registered twice")
        _REGISTRY[slug] = ToolDefinition(slug=slug, compute=func, exports=tuple(exports), document=document)
        return func
    return decorator


def get_tool(slug: str) -> ToolDefinition:
    definition = _REGISTRY.get(slug)
    if definition is None:
        raise ToolNotFoundError(slug)
    return definition


def registered_slugs():
    return sorted(_REGISTRY.keys())


async def execute_tool(slug: str, inputs: Optional[Dict[str, Any]], premium: bool = False) -> Dict[str, Any]:
    """Run a tool. Raises ToolNotFoundError, ValueError or PremiumRequiredError."""
    definition = get_tool(slug)
    try:
        result = definition.compute(inputs or {}, premium)
        if inspect.isawaitable(result):
            result = await result
    except OverflowError:
        raise ValueError("Result is too large")
    return result
