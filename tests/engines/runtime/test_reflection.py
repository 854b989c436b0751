"""Unit tests for engines.runtime.reflection: resolution and the four failure kinds."""

from pathlib import Path

import pytest

from buildexec.engines.runtime import (
    InstantiationError,
    InvocationTargetError,
    MemberAccessError,
    TypeNotFoundError,
    find_constructor,
    find_method,
    invoke_constructor,
    invoke_method,
    resolve_type,
)
from tests.utils.runtime import random_runtime_name
from tests.utils.shells import AbstractShell, BrokenShell, RecordingShell


class Greeter:
    def __init__(self, name: str) -> None:
        self.name = name

    def greet(self, greeting: str) -> str:
        return f"{greeting}, {self.name}"

    def explode(self) -> None:
        raise ValueError("boom")

    @staticmethod
    def shout(text: str) -> str:
        return text.upper()

    def _secret(self) -> str:
        return "hidden"

    label = "not callable"


class TestResolveType:
    def test_dotted_class(self) -> None:
        assert resolve_type("tests.utils.shells.RecordingShell") is RecordingShell

    def test_colon_form(self) -> None:
        assert resolve_type("tests.utils.shells:RecordingShell") is RecordingShell

    def test_module(self) -> None:
        import json

        assert resolve_type("json") is json

    def test_missing_module(self) -> None:
        name = f"{random_runtime_name()}.Shell"
        with pytest.raises(TypeNotFoundError) as exc_info:
            resolve_type(name)
        assert exc_info.value.target == name
        assert isinstance(exc_info.value.__cause__, ImportError)

    def test_missing_attribute(self) -> None:
        with pytest.raises(TypeNotFoundError, match="NoSuchShell"):
            resolve_type("tests.utils.shells:NoSuchShell")

    def test_from_search_path(self, tmp_path: Path) -> None:
        name = random_runtime_name()
        (tmp_path / f"{name}.py").write_text("class Shell:\n    pass\n")
        cls = resolve_type(f"{name}.Shell", [str(tmp_path)])
        assert cls.__name__ == "Shell"

    def test_module_that_fails_to_load(self, tmp_path: Path) -> None:
        name = random_runtime_name()
        (tmp_path / f"{name}.py").write_text("raise RuntimeError('bad module')\n")
        with pytest.raises(TypeNotFoundError, match="bad module"):
            resolve_type(f"{name}.Shell", [str(tmp_path)])


class TestFindMethod:
    def test_public_method(self) -> None:
        m = find_method(Greeter, "greet", str)
        assert m.needs_self
        assert m.target.endswith("Greeter.greet")

    def test_static_method(self) -> None:
        m = find_method(Greeter, "shout", str)
        assert not m.needs_self
        assert invoke_method(m, None, "hi") == "HI"

    def test_missing(self) -> None:
        with pytest.raises(MemberAccessError, match="No method"):
            find_method(Greeter, "wave", str)

    def test_private(self) -> None:
        with pytest.raises(MemberAccessError, match="not public"):
            find_method(Greeter, "_secret")

    def test_not_callable(self) -> None:
        with pytest.raises(MemberAccessError, match="not callable"):
            find_method(Greeter, "label")

    def test_wrong_arity(self) -> None:
        with pytest.raises(MemberAccessError):
            find_method(Greeter, "greet", str, str)

    def test_wrong_parameter_type(self) -> None:
        with pytest.raises(MemberAccessError):
            find_method(Greeter, "greet", int)

    def test_object_parameter_accepts_anything(self) -> None:
        find_method(RecordingShell, "set_property", str, object)


class TestInvoke:
    def test_construct_and_call(self) -> None:
        g = invoke_constructor(find_constructor(Greeter, str), "Ada")
        assert invoke_method(find_method(Greeter, "greet", str), g, "Hello") == "Hello, Ada"

    def test_no_arg_constructor(self) -> None:
        assert isinstance(invoke_constructor(find_constructor(RecordingShell)), RecordingShell)

    def test_constructor_signature_mismatch(self) -> None:
        with pytest.raises(MemberAccessError):
            find_constructor(Greeter)

    def test_abstract_class(self) -> None:
        with pytest.raises(InstantiationError) as exc_info:
            invoke_constructor(find_constructor(AbstractShell))
        assert "AbstractShell" in exc_info.value.target

    def test_not_a_class(self) -> None:
        with pytest.raises(InstantiationError):
            find_constructor(len)

    def test_constructor_raises(self) -> None:
        with pytest.raises(InvocationTargetError) as exc_info:
            invoke_constructor(find_constructor(BrokenShell))
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_target_raises(self) -> None:
        g = Greeter("x")
        with pytest.raises(InvocationTargetError, match="ValueError: boom") as exc_info:
            invoke_method(find_method(Greeter, "explode"), g)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.target.endswith("Greeter.explode")

    def test_wrong_target_type(self) -> None:
        with pytest.raises(MemberAccessError, match="Cannot call"):
            invoke_method(find_method(Greeter, "greet", str), object(), "hi")

    def test_wrong_arity_at_call(self) -> None:
        with pytest.raises(MemberAccessError, match="Cannot call") as exc_info:
            invoke_method(find_method(Greeter, "greet", str), Greeter("x"))
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_error_inside_target_is_invocation_error(self) -> None:
        with pytest.raises(InvocationTargetError):
            invoke_method(find_method(Greeter, "shout", str), None, 42)
