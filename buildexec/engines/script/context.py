"""
BuildContext: the project's build-time state handed to scripts as variables.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any


class BuildContext:
    """
    Build-time values bound into the script shell.

    properties: user / project properties; their keys win over the defaults below.
    classpath: classpath (search path) elements of the project, bound as `classpath`.
    project, session: host objects, bound as `project` / `session` when given.
    logger: bound as `log` when given.
    """

    def __init__(
        self,
        *,
        properties: Mapping[str, Any] | None = None,
        classpath: Sequence[str] | None = None,
        project: Any = None,
        session: Any = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.properties = dict(properties or {})
        self.classpath = list(classpath or [])
        self.project = project
        self.session = session
        self.logger = logger

    def to_bindings(self) -> dict[str, Any]:
        """The BindingSet for one run. A new dict on every call."""
        bindings = dict(self.properties)
        if self.project is not None:
            bindings.setdefault("project", self.project)
        if self.session is not None:
            bindings.setdefault("session", self.session)
        if self.classpath:
            bindings.setdefault("classpath", list(self.classpath))
        if self.logger is not None:
            bindings.setdefault("log", self.logger)
        return bindings
