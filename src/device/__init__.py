"""Device facts providers."""

from .info import BoardDeviceFacts

__all__ = ["BoardDeviceFacts"]
