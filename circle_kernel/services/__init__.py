"""Kernel services -- the imperative shell around the pure domain."""

from circle_kernel.services.base import BaseService
from circle_kernel.services.circle_service import CircleService
from circle_kernel.services.event_recorder import CircleEventRecorder

__all__ = ["BaseService", "CircleEventRecorder", "CircleService"]
