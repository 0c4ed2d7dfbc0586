"""Tests for build targets, modes, and library kinds."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from xcforge.domain.targets import KNOWN_TARGETS, LibType, Mode, Target, resolve_target


class TestLibType:
    def test_extensions(self) -> None:
        assert LibType.STATIC.file_extension == "a"
        assert LibType.DYNAMIC.file_extension == "dylib"


class TestTarget:
    def test_single_library_path(self) -> None:
        ios = KNOWN_TARGETS["ios"]
        assert not ios.is_universal
        assert ios.library_path("core", Mode.DEBUG, LibType.STATIC) == Path(
            "target/aarch64-apple-ios/debug/libcore.a"
        )

    def test_universal_library_path(self) -> None:
        macos = KNOWN_TARGETS["macos"]
        assert macos.is_universal
        assert macos.library_path("core", Mode.RELEASE, LibType.DYNAMIC) == Path(
            "target/universal-macos/release/libcore.dylib"
        )

    def test_architecture_paths(self, tmp_path: Path) -> None:
        sim = KNOWN_TARGETS["ios-sim"]
        paths = sim.architecture_library_paths(
            "core", Mode.DEBUG, LibType.STATIC, target_dir=tmp_path
        )
        assert paths == [
            tmp_path / "aarch64-apple-ios-sim" / "debug" / "libcore.a",
            tmp_path / "x86_64-apple-ios" / "debug" / "libcore.a",
        ]

    def test_requires_architecture(self) -> None:
        with pytest.raises(ValidationError):
            Target(name="empty", display_name="Empty", architectures=())

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            KNOWN_TARGETS["ios"].name = "other"  # type: ignore[misc]


class TestResolveTarget:
    def test_known(self) -> None:
        assert resolve_target("tvos").architectures == ("aarch64-apple-tvos",)

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown target: 'android'"):
            resolve_target("android")
