from .client import FacebookGraphClient

__all__ = ['FacebookGraphClient']
