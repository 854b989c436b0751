"""
Run build scripts from the command line.

Usage:
  python -m buildexec [options] SCRIPT [SCRIPT ...]

Each SCRIPT is a URL (http, https, file, ftp) or a script body. Defaults come
from the environment (see buildexec.core.config).

Exit status: 0 success or skipped, 1 a script failed, 2 build error.
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from buildexec.core.config import settings
from buildexec.core.errors import BuildError, BuildFailure
from buildexec.engines.script import BuildContext, ScriptExecutor
from buildexec.schemas import ExecuteOptions

logger = logging.getLogger("buildexec")


def _parse_property(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {raw!r}")
    return key.strip(), value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildexec",
        description="Execute build scripts (inline or by URL) in the configured scripting runtime.",
    )
    parser.add_argument("scripts", nargs="*", help="Script bodies or URLs, run in order")
    parser.add_argument(
        "--continue",
        dest="continue_executing",
        action="store_true",
        default=settings.SCRIPT_CONTINUE_EXECUTING,
        help="Keep running remaining scripts when one fails",
    )
    parser.add_argument("--encoding", default=settings.SCRIPT_SOURCE_ENCODING, help="Encoding of fetched scripts")
    parser.add_argument(
        "--separate-variables",
        action="store_true",
        default=settings.SCRIPT_BIND_SEPARATE_VARIABLES,
        help="Bind each property as its own variable instead of one `properties` mapping",
    )
    parser.add_argument(
        "--allow-exits",
        action="store_true",
        default=settings.SCRIPT_ALLOW_SYSTEM_EXITS,
        help="Allow scripts to terminate the process",
    )
    parser.add_argument(
        "--search-path",
        action="append",
        default=None,
        help="Directory or zip searched for the runtime and shell (repeatable)",
    )
    parser.add_argument("--shell-class", default=settings.SCRIPT_SHELL_CLASS)
    parser.add_argument("--min-version", default=settings.SCRIPT_MIN_RUNTIME_VERSION)
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.SCRIPT_FETCH_TIMEOUT,
        help="Seconds to wait for a remote script (default: no timeout)",
    )
    parser.add_argument(
        "-D",
        "--property",
        dest="properties",
        action="append",
        type=_parse_property,
        default=[],
        metavar="KEY=VALUE",
        help="Property bound into the scripts (repeatable)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL)

    search_path = args.search_path if args.search_path is not None else settings.script_search_path
    try:
        options = ExecuteOptions(
            scripts=args.scripts,
            continue_executing=args.continue_executing,
            source_encoding=args.encoding,
            bind_properties_to_separate_variables=args.separate_variables,
            allow_system_exits=args.allow_exits,
            search_path=search_path,
            shell_class=args.shell_class,
            min_runtime_version=args.min_version,
            fetch_timeout=args.timeout,
        )
    except ValidationError as e:
        parser.error(str(e))

    context = BuildContext(properties=dict(args.properties), classpath=search_path, logger=logger)
    try:
        ScriptExecutor(options).execute(context)
    except BuildFailure as e:
        logger.error("BUILD FAILURE: %s", e)
        return 1
    except BuildError as e:
        logger.error("BUILD ERROR: %s", e, exc_info=e.__cause__ is not None)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
