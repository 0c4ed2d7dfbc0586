"""xcforge — assemble and patch XCFramework bundles."""

__version__ = "0.1.0"
