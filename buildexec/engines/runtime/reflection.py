"""
Reflective access to the scripting runtime: resolve types, constructors and methods
by name and call them, without importing the runtime anywhere else.

Failures are reported as four distinct errors so callers can tell apart a type
missing from the search path (TypeNotFoundError), a call target that raised
(InvocationTargetError), a type that cannot be instantiated (InstantiationError)
and a member that cannot be used (MemberAccessError).
"""

import importlib
import inspect
import typing
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from buildexec.engines.runtime.locator import search_path_scope

_MISSING = object()


class ReflectionError(Exception):
    """Base error for reflective access; `target` names what was being resolved or called."""

    def __init__(self, message: str, *, target: str) -> None:
        super().__init__(message)
        self.target = target


class TypeNotFoundError(ReflectionError):
    """The named type does not exist on the search path."""


class InvocationTargetError(ReflectionError):
    """The called constructor or method raised; the original error is __cause__."""


class InstantiationError(ReflectionError):
    """The type cannot be instantiated (abstract, or not a class)."""


class MemberAccessError(ReflectionError):
    """The member is missing, private, not callable or does not accept the given types."""


@dataclass(frozen=True)
class Constructor:
    owner: type
    param_types: tuple[type, ...]

    @property
    def target(self) -> str:
        return _qualname(self.owner)


@dataclass(frozen=True)
class Method:
    owner: Any
    name: str
    func: Any
    param_types: tuple[type, ...]
    needs_self: bool

    @property
    def target(self) -> str:
        return f"{_qualname(self.owner)}.{self.name}"


def _qualname(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", repr(obj))
    if inspect.ismodule(obj) or not module:
        return name
    return f"{module}.{name}"


def _split_name(name: str) -> tuple[str, list[str]]:
    """'pkg.mod:Outer.Inner' -> ('pkg.mod', ['Outer', 'Inner']); without ':' the split is found by importing."""
    if ":" in name:
        module, _, attrs = name.partition(":")
        return module, [a for a in attrs.split(".") if a]
    return name, []


def _import_longest_module(dotted: str) -> tuple[Any, list[str]]:
    parts = dotted.split(".")
    for i in range(len(parts), 0, -1):
        candidate = ".".join(parts[:i])
        try:
            return importlib.import_module(candidate), parts[i:]
        except ModuleNotFoundError as e:
            # A missing dependency inside the module is not "try a shorter name"
            if e.name and e.name != candidate and not candidate.startswith(e.name + "."):
                raise
    raise ModuleNotFoundError(f"No module named {parts[0]!r}", name=parts[0])


def resolve_type(name: str, search_path: Sequence[str] = ()) -> Any:
    """
    Resolve a type (or any module attribute) by dotted name, e.g.
    "buildexec.engines.script.sandbox.RestrictedShell" or "pkg.mod:Outer.Inner".

    The search path is put in front of sys.path while importing.
    """
    if not name or not name.strip():
        raise TypeNotFoundError("Empty type name", target=repr(name))
    module_name, attrs = _split_name(name.strip())
    try:
        with search_path_scope(search_path):
            if attrs:
                obj = importlib.import_module(module_name)
            else:
                obj, attrs = _import_longest_module(module_name)
    except ImportError as e:
        raise TypeNotFoundError(f"Unable to find {name} on the search path: {e}", target=name) from e
    except Exception as e:
        raise TypeNotFoundError(f"Unable to load the module of {name}: {e}", target=name) from e

    for attr in attrs:
        obj = getattr(obj, attr, _MISSING)
        if obj is _MISSING:
            raise TypeNotFoundError(f"{name} has no attribute {attr!r}", target=name)
    return obj


def _signature(func: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(func, eval_str=True)
    except ValueError:
        return None
    except Exception:
        # string annotations that do not evaluate: fall back to the raw signature
        try:
            return inspect.signature(func)
        except (TypeError, ValueError):
            return None


def _accepts_type(annotation: Any, param_type: type) -> bool:
    if annotation is inspect.Parameter.empty or annotation is typing.Any:
        return True
    if not isinstance(annotation, type):
        return True
    try:
        return issubclass(param_type, annotation)
    except TypeError:
        return True


def _accepts(sig: inspect.Signature | None, param_types: tuple[type, ...], *, skip_first: bool) -> bool:
    if sig is None:
        return True
    params = list(sig.parameters.values())
    if skip_first:
        if not params:
            return False
        params = params[1:]
    try:
        bound = sig.replace(parameters=params).bind(*param_types)
    except TypeError:
        return False
    by_name = {p.name: p for p in params}
    for pname, value in bound.arguments.items():
        param = by_name[pname]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            if not all(_accepts_type(param.annotation, t) for t in value):
                return False
        elif not _accepts_type(param.annotation, value):
            return False
    return True


def find_constructor(cls: Any, *param_types: type) -> Constructor:
    """Resolve a constructor of *cls* that accepts positional arguments of *param_types*."""
    if not isinstance(cls, type):
        raise InstantiationError(f"{_qualname(cls)} is not a class", target=_qualname(cls))
    init = cls.__init__
    if init is object.__init__:
        ok = not param_types or cls.__new__ is not object.__new__
    else:
        ok = _accepts(_signature(init), param_types, skip_first=True)
    if not ok:
        names = ", ".join(t.__name__ for t in param_types)
        raise MemberAccessError(
            f"No constructor {_qualname(cls)}({names})", target=_qualname(cls)
        )
    return Constructor(owner=cls, param_types=tuple(param_types))


def find_method(owner: Any, name: str, *param_types: type) -> Method:
    """Resolve method *name* on *owner* (a class or module) accepting *param_types*."""
    target = f"{_qualname(owner)}.{name}"
    if name.startswith("_"):
        raise MemberAccessError(f"{target} is not public", target=target)
    try:
        raw = inspect.getattr_static(owner, name)
    except AttributeError:
        raise MemberAccessError(f"No method {target}", target=target) from None
    func = getattr(owner, name)
    if not callable(func):
        raise MemberAccessError(f"{target} is not callable", target=target)

    needs_self = (
        isinstance(owner, type)
        and not isinstance(raw, (staticmethod, classmethod))
        and inspect.isfunction(raw)
    )
    if not _accepts(_signature(func), tuple(param_types), skip_first=needs_self):
        names = ", ".join(t.__name__ for t in param_types)
        raise MemberAccessError(f"No method {target}({names})", target=target)
    return Method(
        owner=owner,
        name=name,
        func=func,
        param_types=tuple(param_types),
        needs_self=needs_self,
    )


def invoke_constructor(ctor: Constructor, *args: Any) -> Any:
    cls = ctor.owner
    if inspect.isabstract(cls):
        raise InstantiationError(f"{ctor.target} is abstract", target=ctor.target)
    try:
        return cls(*args)
    except Exception as e:
        raise InvocationTargetError(
            f"{ctor.target}() raised {type(e).__name__}: {e}", target=ctor.target
        ) from e


def invoke_method(method: Method, target: Any, *args: Any) -> Any:
    if method.needs_self:
        if not isinstance(target, method.owner):
            raise MemberAccessError(
                f"Cannot call {method.target} on {type(target).__name__}",
                target=method.target,
            )
        call_args: tuple[Any, ...] = (target, *args)
    else:
        call_args = args
    sig = _signature(method.func)
    if sig is not None:
        try:
            sig.bind(*call_args)
        except TypeError as e:
            raise MemberAccessError(
                f"Cannot call {method.target} with {len(args)} argument(s): {e}",
                target=method.target,
            ) from e
    try:
        return method.func(*call_args)
    except Exception as e:
        raise InvocationTargetError(
            f"{method.target}() raised {type(e).__name__}: {e}", target=method.target
        ) from e
