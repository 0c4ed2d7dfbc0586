"""Tests for ServiceResult, ServiceError, and the error taxonomy."""

from __future__ import annotations

import json
from pathlib import Path

from xcforge.services.errors import (
    BundleNotFound,
    IOFailure,
    PatchFailed,
    ProcessFailure,
    SpawnFault,
    ValidationError,
    XcforgeError,
)
from xcforge.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="package", data={"xcframework": "out/Core.xcframework"})
        assert result.ok is True
        assert result.warnings == []
        assert result.error is None

    def test_failure_from_exception(self) -> None:
        result = ServiceResult.failure("patch", BundleNotFound(Path("/build")))
        assert result.ok is False
        assert result.error == ServiceError(
            code="BUNDLE_NOT_FOUND",
            message="failed to find .xcframework in /build",
            detail={"path": "/build"},
        )

    def test_json_serialization(self) -> None:
        exc = ProcessFailure(b"boom", command=["xcodebuild"], returncode=1)
        parsed = json.loads(ServiceResult.failure("package", exc).model_dump_json())
        assert parsed["error"]["code"] == "PROCESS_FAILED"
        assert parsed["error"]["detail"] == {"command": ["xcodebuild"], "returncode": 1}


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(BundleNotFound, ValidationError)
        for cls in (ValidationError, ProcessFailure, IOFailure, PatchFailed):
            assert issubclass(cls, XcforgeError)
        assert not issubclass(SpawnFault, XcforgeError)

    def test_process_failure_decodes_invalid_utf8(self) -> None:
        exc = ProcessFailure(b"bad \xff byte")
        assert exc.stderr == b"bad \xff byte"
        assert str(exc) == "bad � byte"

    def test_patch_failed_includes_cause(self) -> None:
        try:
            try:
                raise ValidationError("headers missing", "/s/headers")
            except ValidationError as inner:
                raise PatchFailed("Failed to patch /s", Path("/s")) from inner
        except PatchFailed as exc:
            assert str(exc) == "Failed to patch /s: headers missing"

    def test_io_failure_detail(self) -> None:
        exc = IOFailure("copy failed", Path("/a"), Path("/b"))
        assert exc.detail() == {"paths": ["/a", "/b"]}
