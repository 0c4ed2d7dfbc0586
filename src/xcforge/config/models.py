"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, xcforge.toml only contains
overrides. A typical project sets ``[bundle] name`` and ``lib_name``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from xcforge.domain.targets import LibType


class BundleConfig(BaseModel):
    """[bundle] section."""

    model_config = {"frozen": True}

    name: str | None = None
    lib_name: str | None = None
    lib_type: LibType = LibType.STATIC
    targets: list[str] = Field(default_factory=lambda: ["ios", "ios-sim", "macos"])
    generated_dir: Path = Path("generated")
    output_dir: Path = Path(".")


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    release: bool = False
    skip_build: bool = False
    cargo: str = "cargo"
    xcodebuild: str = "xcodebuild"
    lipo: str = "lipo"

