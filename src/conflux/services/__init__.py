"""Services facade for Conflux.

Public API boundary for the CLI and other clients.
"""

from conflux.services.capture import CaptureService, CaptureSession

__all__ = ["CaptureService", "CaptureSession"]
