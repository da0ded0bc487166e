"""Runtime settings for the file-sharing server.

Settings are built once at startup (from the CLI or from the environment) and
attached to ``app.state``; handlers receive them through ``get_settings``.

Env vars:
- UPDOWN_SERVE_DIR: directory exposed for browsing/download (default: .)
- UPDOWN_OUTPUT_DIR: directory receiving uploads (default: .)
- UPDOWN_HOST: bind address (default: 0.0.0.0)
- UPDOWN_PORT: listen port (default: 6600)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 6600


@dataclass(frozen=True)
class Settings:
    serve_dir: Path = Path(".")
    output_dir: Path = Path(".")
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        # Canonical absolute roots; path confinement compares against these
        object.__setattr__(self, "serve_dir", Path(self.serve_dir).resolve())
        object.__setattr__(self, "output_dir", Path(self.output_dir).resolve())

    @classmethod
    def from_env(cls) -> "Settings":
        raw_port = os.getenv("UPDOWN_PORT", str(DEFAULT_PORT))
        try:
            port = int(raw_port)
        except ValueError:
            raise ValueError(f"UPDOWN_PORT must be an integer, got {raw_port!r}") from None
        return cls(
            serve_dir=Path(os.getenv("UPDOWN_SERVE_DIR", ".")),
            output_dir=Path(os.getenv("UPDOWN_OUTPUT_DIR", ".")),
            host=os.getenv("UPDOWN_HOST", DEFAULT_HOST),
            port=port,
        )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
