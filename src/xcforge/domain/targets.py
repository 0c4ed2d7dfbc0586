"""Build targets, build modes, and library kinds.

A target is either *single* (one Rust triple, built directly) or
*universal* (several triples merged into one fat library with ``lipo``).
Library paths follow cargo's ``target/<triple>/<mode>/`` layout.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class Mode(StrEnum):
    """Cargo build profile."""

    DEBUG = "debug"
    RELEASE = "release"


class LibType(StrEnum):
    """Kind of library artifact produced per target."""

    STATIC = "static"
    DYNAMIC = "dynamic"

    @property
    def file_extension(self) -> str:
        return "a" if self is LibType.STATIC else "dylib"


class Target(BaseModel):
    """A platform the bundle ships a slice for.

    Attributes:
        name: Short CLI/config name (e.g. ``"ios-sim"``).
        display_name: Human label used in progress output.
        architectures: Rust target triples built for this platform.
        universal_name: Directory under ``target/`` holding the merged
            library. Only set for universal targets.
    """

    model_config = {"frozen": True}

    name: str
    display_name: str
    architectures: tuple[str, ...] = Field(min_length=1)
    universal_name: str | None = None

    @property
    def is_universal(self) -> bool:
        return self.universal_name is not None

    def library_path(
        self,
        lib_name: str,
        mode: Mode,
        lib_type: LibType,
        *,
        target_dir: Path = Path("target"),
    ) -> Path:
        """Path of the library ``xcodebuild`` receives for this target."""
        triple = self.universal_name or self.architectures[0]
        return target_dir / triple / mode.value / f"lib{lib_name}.{lib_type.file_extension}"

    def architecture_library_paths(
        self,
        lib_name: str,
        mode: Mode,
        lib_type: LibType,
        *,
        target_dir: Path = Path("target"),
    ) -> list[Path]:
        """Per-triple library paths, the inputs of a universal merge."""
        filename = f"lib{lib_name}.{lib_type.file_extension}"
        return [target_dir / arch / mode.value / filename for arch in self.architectures]


def _single(name: str, display_name: str, triple: str) -> Target:
    return Target(name=name, display_name=display_name, architectures=(triple,))


def _universal(name: str, display_name: str, universal_name: str, *triples: str) -> Target:
    return Target(
        name=name,
        display_name=display_name,
        architectures=triples,
        universal_name=universal_name,
    )


KNOWN_TARGETS: dict[str, Target] = {
    t.name: t
    for t in (
        _single("ios", "iOS", "aarch64-apple-ios"),
        _universal(
            "ios-sim",
            "iOS Simulator",
            "universal-ios",
            "aarch64-apple-ios-sim",
            "x86_64-apple-ios",
        ),
        _universal(
            "macos",
            "macOS",
            "universal-macos",
            "aarch64-apple-darwin",
            "x86_64-apple-darwin",
        ),
        _single("tvos", "tvOS", "aarch64-apple-tvos"),
        _universal(
            "tvos-sim",
            "tvOS Simulator",
            "universal-tvos",
            "aarch64-apple-tvos-sim",
            "x86_64-apple-tvos",
        ),
        _single("visionos", "visionOS", "aarch64-apple-visionos"),
        _single("visionos-sim", "visionOS Simulator", "aarch64-apple-visionos-sim"),
    )
}


def resolve_target(name: str) -> Target:
    """Look up a target by its short name."""
    try:
        return KNOWN_TARGETS[name]
    except KeyError:
        known = ", ".join(sorted(KNOWN_TARGETS))
        msg = f"Unknown target: {name!r} (known: {known})"
        raise ValueError(msg) from None
