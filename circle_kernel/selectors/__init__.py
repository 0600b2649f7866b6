"""Read-only query selectors."""

from circle_kernel.selectors.base import BaseSelector
from circle_kernel.selectors.circle_selector import (
    CircleSelector,
    is_final,
    resolve_circle_id,
)

__all__ = ["BaseSelector", "CircleSelector", "is_final", "resolve_circle_id"]
