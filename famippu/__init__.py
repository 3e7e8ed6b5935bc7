"""NES picture processing unit, VRAM bus, register access and iNES ROM loading."""

__version__ = "0.1.0"