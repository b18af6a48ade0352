from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_ENTRYPOINTS = ("index.js", "server.js", "app.js", "main.js")


def _env_flag(value: Optional[str], fallback: bool) -> bool:
    if value is None or not value.strip():
        return fallback
    return value.strip().lower() not in ("0", "false", "no", "off")


class AnalyzerConfig(BaseModel):
    """
    Immutable settings for one analyzer.

    Relative directories are resolved against project_root at lookup time,
    so the same config can be reused across analysis calls.
    """

    model_config = ConfigDict(frozen=True)

    project_root: Path = Path(".")
    validators_dir: str = "src/validations"
    validator_suffixes: tuple[str, ...] = (".validation.js",)
    controllers_dir: str = "src/controllers"
    controller_suffixes: tuple[str, ...] = (".controller.js", ".js")
    entrypoint_files: tuple[str, ...] = DEFAULT_ENTRYPOINTS
    auto_detect: bool = True
    payload_object: str = "req.body"

    def resolve(self, rel: str) -> Path:
        p = Path(rel).expanduser()
        if p.is_absolute():
            return p
        return (Path(self.project_root).expanduser() / p).resolve()

    @property
    def validators_path(self) -> Path:
        return self.resolve(self.validators_dir)

    @property
    def controllers_path(self) -> Path:
        return self.resolve(self.controllers_dir)

    @classmethod
    def from_env(cls, project_root: Path, **overrides) -> "AnalyzerConfig":
        values: dict = {"project_root": project_root}
        if os.getenv("ROUTELENS_VALIDATORS_DIR"):
            values["validators_dir"] = os.getenv("ROUTELENS_VALIDATORS_DIR")
        if os.getenv("ROUTELENS_CONTROLLERS_DIR"):
            values["controllers_dir"] = os.getenv("ROUTELENS_CONTROLLERS_DIR")
        if os.getenv("ROUTELENS_PAYLOAD_OBJECT"):
            values["payload_object"] = os.getenv("ROUTELENS_PAYLOAD_OBJECT")
        values["auto_detect"] = _env_flag(os.getenv("ROUTELENS_AUTO_DETECT"), True)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
