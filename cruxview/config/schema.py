from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from matplotlib import colormaps
from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    scheme: Literal["http", "https"] = "http"
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    path: str = "/points"

    @property
    def base_url(self) -> str:
        path = self.path if self.path.startswith("/") else "/" + self.path
        return f"{self.scheme}://{self.host}:{self.port}{path}"


class LoaderConfig(BaseModel):
    max_workers: Optional[int] = Field(None, ge=1)
    timeout_s: Optional[float] = Field(None, gt=0)


class ColorConfig(BaseModel):
    attribute: str = "z"
    intensity_max: float = Field(255.0, gt=0)
    gradient: str = "turbo"
    fallback_rgba: tuple[float, float, float, float] = (1.0, 0.65, 0.0, 1.0)

    @field_validator("fallback_rgba")
    @classmethod
    def _check_rgba(cls, v: tuple[float, float, float, float]) -> tuple[float, float, float, float]:
        if any(c < 0.0 or c > 1.0 for c in v):
            raise ValueError("fallback_rgba components must lie within [0, 1]")
        return v

    @field_validator("gradient")
    @classmethod
    def _check_gradient(cls, v: str) -> str:
        if v not in colormaps:
            raise ValueError(f"Unknown gradient '{v}'")
        return v


class ViewerConfig(BaseModel):
    server: ServerConfig = ServerConfig()
    collection: str = "default"
    loader: LoaderConfig = LoaderConfig()
    color: ColorConfig = ColorConfig()


def load_config(path: str | Path) -> ViewerConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    return ViewerConfig.model_validate(data)
