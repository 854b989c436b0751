"""
Settings for buildexec, read from the environment (and an optional .env file).

Values here are defaults only; ExecuteOptions / StubOptions may override any of
them per run.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "buildexec"
    LOG_LEVEL: str = "INFO"

    # Scripting runtime located on the search path
    SCRIPT_RUNTIME_MODULE: str = "RestrictedPython"
    SCRIPT_RUNTIME_DISTRIBUTION: str = "RestrictedPython"
    SCRIPT_SHELL_CLASS: str = "buildexec.engines.script.sandbox.RestrictedShell"
    SCRIPT_MIN_RUNTIME_VERSION: str = "6.0"
    # Comma-separated directories / zip files searched before sys.path
    SCRIPT_SEARCH_PATH: str = ""

    # Script execution
    SCRIPT_SOURCE_ENCODING: str | None = None
    SCRIPT_FETCH_TIMEOUT: float | None = None  # None: remote fetches may block forever
    SCRIPT_CONTINUE_EXECUTING: bool = False
    SCRIPT_BIND_SEPARATE_VARIABLES: bool = False
    SCRIPT_ALLOW_SYSTEM_EXITS: bool = False

    # Stub generation
    STUB_GENERATOR_CLASS: str | None = None
    STUB_MIN_RUNTIME_VERSION: str = "6.0"
    STUB_SKIP: bool = False

    @property
    def script_search_path(self) -> list[str]:
        raw = (self.SCRIPT_SEARCH_PATH or "").strip()
        return [p.strip() for p in raw.split(",") if p.strip()]


settings = Settings()
