"""
Runtime locator: find the scripting runtime on the search path and check its version.

The search path is resolved late (at run time), so nothing here imports the
runtime. Presence is checked with PathFinder and the version is read from the
distribution metadata.
"""

import importlib
import logging
import re
import sys
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from importlib import metadata
from importlib.machinery import PathFinder

_log = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^\s*v?(\d+(?:\.\d+)*)(.*)$")
_POST_RELEASE_RE = re.compile(r"^[.\-_]?(post|rev|r)\d*$", re.IGNORECASE)

_sys_path_lock = threading.RLock()


class RuntimeNotFoundError(LookupError):
    """Raised when the scripting runtime is not on the search path."""


class RuntimeStatus(str, Enum):
    SUPPORTED = "supported"
    UNSUPPORTED_VERSION = "unsupported_version"
    RUNTIME_NOT_FOUND = "runtime_not_found"


@dataclass(frozen=True)
class RuntimeCapability:
    status: RuntimeStatus
    runtime: str
    minimum_version: str
    detected_version: str | None = None

    @property
    def supported(self) -> bool:
        return self.status is RuntimeStatus.SUPPORTED


def parse_version(text: str | None) -> tuple[tuple[int, ...], bool] | None:
    """
    Split a version string into its numeric release and a pre-release flag.

    "2.4.0" -> ((2, 4, 0), False); "3.0.0-beta-1" -> ((3, 0, 0), True).
    Post-release tags ("1.0.post2") are not pre-releases. Returns None when the
    string does not start with a number.
    """
    if not text:
        return None
    m = _VERSION_RE.match(text)
    if m is None:
        return None
    release = tuple(int(part) for part in m.group(1).split("."))
    tag = m.group(2).strip()
    is_pre = bool(tag) and not _POST_RELEASE_RE.match(tag)
    return release, is_pre


def version_at_least(detected: str | None, minimum: str) -> bool:
    """True when detected >= minimum. Unparseable versions never qualify."""
    have = parse_version(detected)
    need = parse_version(minimum)
    if have is None or need is None:
        return False
    width = max(len(have[0]), len(need[0]))
    have_key = (have[0] + (0,) * (width - len(have[0])), 0 if have[1] else 1)
    need_key = (need[0] + (0,) * (width - len(need[0])), 0 if need[1] else 1)
    return have_key >= need_key


def _normalize_dist_name(name: str) -> str:
    return re.sub(r"[-_.]+", "-", name).lower()


@contextmanager
def search_path_scope(search_path: Sequence[str]) -> Iterator[None]:
    """
    Put *search_path* in front of sys.path for the duration of the block.

    Only entries that were added here are removed afterwards. sys.path is
    process-wide, so scopes are serialized.
    """
    with _sys_path_lock:
        added = [p for p in search_path if p not in sys.path]
        sys.path[0:0] = added
        if added:
            importlib.invalidate_caches()
        try:
            yield
        finally:
            for p in added:
                try:
                    sys.path.remove(p)
                except ValueError:
                    _log.warning("Search path entry %s was already removed from sys.path", p)


class RuntimeLocator:
    """Detect the scripting runtime (module + distribution) on a late-bound search path."""

    def __init__(
        self,
        runtime_module: str,
        *,
        distribution: str | None = None,
        search_path: Sequence[str] = (),
    ) -> None:
        self.runtime_module = runtime_module
        self.distribution = distribution or runtime_module.split(".")[0]
        self.search_path = list(search_path)

    def _paths(self) -> list[str]:
        return self.search_path + [p for p in sys.path if p not in self.search_path]

    def is_present(self) -> bool:
        top = self.runtime_module.split(".")[0]
        if top in sys.modules:
            return True
        return PathFinder.find_spec(top, self._paths()) is not None

    def detect_version(self) -> str | None:
        """Version of the runtime on the search path, or None if it cannot be determined."""
        if not self.is_present():
            return None
        wanted = _normalize_dist_name(self.distribution)
        for dist in metadata.distributions(path=self._paths()):
            name = dist.metadata.get("Name") if dist.metadata else None
            if name and _normalize_dist_name(name) == wanted:
                return dist.version
        module = sys.modules.get(self.runtime_module)
        version = getattr(module, "__version__", None)
        return str(version) if version is not None else None

    def check(self, minimum_version: str) -> RuntimeCapability:
        if not self.is_present():
            return RuntimeCapability(
                status=RuntimeStatus.RUNTIME_NOT_FOUND,
                runtime=self.runtime_module,
                minimum_version=minimum_version,
            )
        detected = self.detect_version()
        status = (
            RuntimeStatus.SUPPORTED
            if version_at_least(detected, minimum_version)
            else RuntimeStatus.UNSUPPORTED_VERSION
        )
        return RuntimeCapability(
            status=status,
            runtime=self.runtime_module,
            minimum_version=minimum_version,
            detected_version=detected,
        )

    def supports(self, minimum_version: str) -> bool:
        """Host-facing check; raises RuntimeNotFoundError instead of answering False for a missing runtime."""
        capability = self.check(minimum_version)
        if capability.status is RuntimeStatus.RUNTIME_NOT_FOUND:
            raise RuntimeNotFoundError(
                f"Scripting runtime {self.runtime_module!r} not found on the search path."
            )
        return capability.supported

    def log_version(self, goal: str) -> None:
        _log.info(
            "Using %s %s to perform %s.",
            self.runtime_module,
            self.detect_version() or "(unknown version)",
            goal,
        )
