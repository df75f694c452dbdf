# Models package
from .device import Device
from .reading import Reading

__all__ = ['Device', 'Reading']
