from .base import PlatformAdapter
from .registry import build_adapter_registry

__all__ = ['PlatformAdapter', 'build_adapter_registry']
