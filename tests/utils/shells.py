"""Test shells and generators resolved by dotted name (tests.utils.shells.*)."""

import sys
from abc import ABC, abstractmethod
from typing import Any

from buildexec.engines.script.exit_trap import is_installed


class RecordingShell:
    """
    Records bindings and evaluated sources. Sources starting with:
    - "fail": raise RuntimeError
    - "exit": call sys.exit(3)
    - "raise-exit": raise SystemExit(4) directly
    """

    instances: list["RecordingShell"] = []

    def __init__(self) -> None:
        self.variables: dict[str, Any] = {}
        self.evaluated: list[str] = []
        self.trap_installed: list[bool] = []
        RecordingShell.instances.append(self)

    def set_property(self, name: str, value: object) -> None:
        self.variables[name] = value

    def evaluate(self, source: str) -> None:
        self.evaluated.append(source)
        self.trap_installed.append(is_installed())
        if source.startswith("fail"):
            raise RuntimeError(f"script failed: {source}")
        if source.startswith("raise-exit"):
            raise SystemExit(4)
        if source.startswith("exit"):
            sys.exit(3)


class AbstractShell(ABC):
    @abstractmethod
    def evaluate(self, source: str) -> None: ...

    def set_property(self, name: str, value: object) -> None:
        pass


class BrokenShell:
    def __init__(self) -> None:
        raise RuntimeError("shell cannot start")


class ShellWithoutEvaluate:
    def set_property(self, name: str, value: object) -> None:
        pass


class StubGenerator:
    calls: list[tuple[list[str], str]] = []

    def generate(self, sources: list, output_dir: str) -> list[str]:
        StubGenerator.calls.append((sources, output_dir))
        return [f"{output_dir}/{s.rsplit('/', 1)[-1]}i" for s in sources]


class FailingStubGenerator:
    def generate(self, sources: list, output_dir: str) -> list[str]:
        raise OSError("disk full")
