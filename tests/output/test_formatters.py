"""Tests for ServiceResult formatting."""

from __future__ import annotations

import json

from xcforge.output.formatters import format_result
from xcforge.services.result import ServiceError, ServiceResult


class TestFormatResult:
    def test_ok_human(self) -> None:
        result = ServiceResult(
            ok=True,
            op="package",
            data={"xcframework": "out/Core.xcframework", "targets": ["ios", "macos"]},
        )
        assert format_result(result) == (
            "OK: package\n  xcframework: out/Core.xcframework\n  targets: ios, macos"
        )

    def test_error_human_strips_trailing_newline(self) -> None:
        result = ServiceResult(
            ok=False,
            op="package",
            error=ServiceError(code="PROCESS_FAILED", message="unsupported architecture\n"),
        )
        assert format_result(result) == "ERROR: package - unsupported architecture"

    def test_json(self) -> None:
        result = ServiceResult(ok=True, op="patch", data={"slices": ["ios-arm64"]})
        parsed = json.loads(format_result(result, json_output=True))
        assert parsed["ok"] is True
        assert parsed["data"]["slices"] == ["ios-arm64"]
