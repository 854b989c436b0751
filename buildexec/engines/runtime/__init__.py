"""
Runtime discovery: locate the scripting runtime on a late-bound search path and
reach its types reflectively.
"""

from .locator import (
    RuntimeCapability,
    RuntimeLocator,
    RuntimeNotFoundError,
    RuntimeStatus,
    parse_version,
    search_path_scope,
    version_at_least,
)
from .reflection import (
    Constructor,
    InstantiationError,
    InvocationTargetError,
    MemberAccessError,
    Method,
    ReflectionError,
    TypeNotFoundError,
    find_constructor,
    find_method,
    invoke_constructor,
    invoke_method,
    resolve_type,
)

__all__ = [
    "Constructor",
    "InstantiationError",
    "InvocationTargetError",
    "MemberAccessError",
    "Method",
    "ReflectionError",
    "RuntimeCapability",
    "RuntimeLocator",
    "RuntimeNotFoundError",
    "RuntimeStatus",
    "TypeNotFoundError",
    "find_constructor",
    "find_method",
    "invoke_constructor",
    "invoke_method",
    "parse_version",
    "resolve_type",
    "search_path_scope",
    "version_at_least",
]
