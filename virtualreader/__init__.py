"""Rebuild flat flash images from PSDZ bootloader and software flash files."""

__version__ = "0.3.0"