"""Cartridge loading, disassembly, interrupt and joypad state, and scanline rendering for a handheld console."""

__version__ = "0.1.0"