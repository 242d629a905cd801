"""agent-relay configuration loader."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""


@dataclass
class RelayConfig:
    """Main configuration for the relay server."""

    # AI Foundry project + pre-provisioned agent
    project_endpoint: str = ""
    agent_id: str = ""
    thread_id: str = ""

    # Run polling
    poll_interval: float = 0.1
    run_timeout: float | None = 120.0
    request_timeout: float = 30.0

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    serialize_threads: bool = True

    log_level: str = "INFO"

    @classmethod
    def load(cls, config_path: str = ".agent-relay/config.yaml") -> "RelayConfig":
        """Load config from YAML file, then apply environment overrides.

        Args:
            config_path: Path to config file (relative or absolute)

        Returns:
            Loaded configuration (not yet validated)
        """
        path = Path(config_path)
        data: dict = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        studio = data.get("azure_ai_studio", {}) or {}
        polling = data.get("polling", {}) or {}
        server = data.get("server", {}) or {}
        logging_data = data.get("logging", {}) or {}

        defaults = cls()
        config = cls(
            project_endpoint=studio.get("project_endpoint", ""),
            agent_id=studio.get("agent_id", ""),
            thread_id=studio.get("thread_id", ""),
            poll_interval=float(polling.get("interval", defaults.poll_interval)),
            run_timeout=_optional_float(polling.get("timeout", defaults.run_timeout)),
            request_timeout=float(polling.get("request_timeout", defaults.request_timeout)),
            host=server.get("host", defaults.host),
            port=int(server.get("port", defaults.port)),
            cors_origins=list(server.get("cors_origins") or defaults.cors_origins),
            serialize_threads=bool(server.get("serialize_threads", True)),
            log_level=str(logging_data.get("level", defaults.log_level)).upper(),
        )
        config.apply_env()
        return config

    def apply_env(self, environ: dict[str, str] | None = None) -> None:
        """Override Azure settings from environment variables when set."""
        env = os.environ if environ is None else environ
        self.project_endpoint = env.get("AZURE_AI_PROJECT_ENDPOINT") or self.project_endpoint
        self.agent_id = env.get("AZURE_AI_AGENT_ID") or self.agent_id
        self.thread_id = env.get("AZURE_AI_THREAD_ID") or self.thread_id

    def validate(self) -> "RelayConfig":
        """Fail fast if any of the three required Azure values is missing.

        Raises:
            ConfigError: naming the first missing setting
        """
        required = [
            ("azure_ai_studio.project_endpoint", self.project_endpoint),
            ("azure_ai_studio.agent_id", self.agent_id),
            ("azure_ai_studio.thread_id", self.thread_id),
        ]
        for name, value in required:
            if not value or not value.strip():
                raise ConfigError(f"{name} is missing or empty!")
        if self.poll_interval < 0:
            raise ConfigError("polling.interval must not be negative")
        if self.run_timeout is not None and self.run_timeout <= 0:
            raise ConfigError("polling.timeout must be positive (or null to disable)")
        return self


def _optional_float(value) -> float | None:
    if value is None:
        return None
    return float(value)
