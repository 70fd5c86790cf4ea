"""Persistent application settings."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("config.json")


@dataclass
class AppConfig:
    """Settings saved between runs as JSON."""

    last_input_dir: str | None = None
    last_output_dir: str | None = None
    window_width: float = 600.0
    window_height: float = 400.0
    ucl_algorithm: str = "nrv2b"

    @classmethod
    def load(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> "AppConfig":
        """Read settings from *path*, falling back to defaults on any problem."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except (OSError, ValueError, TypeError):
            return cls()

    def save(self, path: str | Path = DEFAULT_CONFIG_PATH) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "AppConfig":
        """Build a config from a mapping; required fields must be present."""
        if not isinstance(data, dict):
            raise TypeError("configuration must be a JSON object")
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name in data:
                values[f.name] = data[f.name]
            elif f.name.startswith("last_"):
                values[f.name] = None
            else:
                raise ValueError(f"missing field {f.name!r}")
        for name in ("last_input_dir", "last_output_dir"):
            if values[name] is not None and not isinstance(values[name], str):
                raise TypeError(f"{name} must be a string or null")
        for name in ("window_width", "window_height"):
            if isinstance(values[name], bool) or not isinstance(values[name], (int, float)):
                raise TypeError(f"{name} must be a number")
            values[name] = float(values[name])
        if not isinstance(values["ucl_algorithm"], str):
            raise TypeError("ucl_algorithm must be a string")
        return cls(**values)

    def update_directories(self, input_path: str | Path, output_path: str | Path) -> None:
        self.last_input_dir = str(Path(input_path).parent)
        self.last_output_dir = str(Path(output_path).parent)