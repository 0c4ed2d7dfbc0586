"""Service layer — step running, bundle patching, packaging.

Services may import from the domain layer, and the step runner drives
the progress handles in ``xcforge.output.progress``. They must never
import from commands or from result formatting.
"""
