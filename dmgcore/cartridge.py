"""Cartridge header parsing, ROM loading and battery-backed save RAM."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO

from .inflate import InflateError, gunzip

__all__ = [
    "CartridgeError",
    "MbcType",
    "CartridgeHeader",
    "Cartridge",
    "decompress",
    "parse_header",
    "load_rom",
]

ROM_BANK_SIZE = 16384
RAM_BANK_SIZE = 8192

_TITLE = 0x0134
_TITLE_LENGTH = 16
_CGB_FLAG = 0x0143
_TYPE = 0x0147
_ROM_SIZE = 0x0148
_RAM_SIZE = 0x0149
_HEADER_END = 0x014A


class CartridgeError(ValueError):
    """Raised when a ROM image cannot be used."""


class MbcType(IntEnum):
    """Memory bank controller fitted to a cartridge."""

    NONE = 0
    MBC1 = 1
    MBC2 = 2
    MBC3 = 3
    MBC5 = 5
    RUMBLE = 15
    HUC1 = 0xC1
    HUC3 = 0xC3


def _types(mbc: MbcType, codes) -> dict[int, MbcType]:
    return {code: mbc for code in codes}


_MBC_BY_TYPE: dict[int, MbcType] = {
    **_types(MbcType.MBC1, range(0x01, 0x04)),
    **_types(MbcType.MBC2, (0x05, 0x06)),
    **_types(MbcType.MBC3, range(0x0F, 0x14)),
    **_types(MbcType.MBC5, range(0x19, 0x1C)),
    **_types(MbcType.RUMBLE, range(0x1C, 0x1F)),
    0xFE: MbcType.HUC3,
    0xFF: MbcType.HUC1,
}

_RTC_TYPES = frozenset({0x0F, 0x10})
_BATTERY_TYPES = frozenset({0x03, 0x06, 0x09, 0x0D, 0x10, 0x12, 0x13, 0x1B, 0x1E})

_ROM_BANKS = {
    **{code: 2 << code for code in range(9)},
    0x53: 128,
    0x54: 128,
    0x55: 128,
}

_RAM_BANKS = {0: 1, 1: 1, 2: 1, 3: 4, 4: 16, 5: 4}


@dataclass(frozen=True)
class CartridgeHeader:
    """The parts of the cartridge header the emulator cares about."""

    name: str
    cartridge_type: int
    mbc: MbcType
    battery: bool
    rtc: bool
    rom_banks: int
    ram_banks: int
    cgb: bool
    gba: bool

    @property
    def rom_length(self) -> int:
        return ROM_BANK_SIZE * self.rom_banks

    @property
    def sram_length(self) -> int:
        return RAM_BANK_SIZE * self.ram_banks


@dataclass
class Cartridge:
    """A loaded ROM image together with its save RAM."""

    header: CartridgeHeader
    rom: bytes
    sram: bytearray = field(default_factory=bytearray)
    sram_loaded: bool = False
    sram_dirty: bool = True

    def load_sram(self, stream: BinaryIO | None) -> bool:
        """Fill save RAM from ``stream``; False if the cartridge has no battery."""
        if not self.header.battery:
            return False
        # Save RAM counts as loaded even when there is nothing to read.
        self.sram_loaded = True
        if stream is None:
            return True
        content = stream.read(len(self.sram))
        self.sram[: len(content)] = content
        return True

    def save_sram(self, stream: BinaryIO | None) -> bool:
        """Write save RAM to ``stream``; False if there is nothing that may be saved."""
        if not self.header.battery or not self.sram_loaded or not self.header.ram_banks:
            return False
        if stream is None:
            return True
        stream.write(bytes(self.sram))
        return True


def decompress(data: bytes) -> bytes:
    """Return gzip-compressed data expanded, anything else unchanged."""
    if len(data) < 2 or data[0] != 0x1F or data[1] != 0x8B:
        return data
    try:
        return gunzip(data)
    except InflateError:
        return data


def parse_header(
    data: bytes,
    force_battery: bool = False,
    no_battery: bool = False,
    force_dmg: bool = False,
    gba_mode: bool = False,
) -> CartridgeHeader:
    """Read the cartridge header from a ROM image."""
    if len(data) < _HEADER_END:
        raise CartridgeError("ROM image is too short to hold a header")

    title = bytes(data[_TITLE : _TITLE + _TITLE_LENGTH]).split(b"\x00", 1)[0]
    type_code = data[_TYPE]

    rom_banks = _ROM_BANKS.get(data[_ROM_SIZE], 0)
    if not rom_banks:
        raise CartridgeError(f"unknown ROM size {data[_ROM_SIZE]:02X}")
    ram_banks = _RAM_BANKS.get(data[_RAM_SIZE], 0)
    if not ram_banks:
        raise CartridgeError(f"unknown SRAM size {data[_RAM_SIZE]:02X}")

    cgb = data[_CGB_FLAG] in (0x80, 0xC0) and not force_dmg
    return CartridgeHeader(
        name=title.decode("latin-1"),
        cartridge_type=type_code,
        mbc=_MBC_BY_TYPE.get(type_code, MbcType.NONE),
        battery=(type_code in _BATTERY_TYPES and not no_battery) or force_battery,
        rtc=type_code in _RTC_TYPES,
        rom_banks=rom_banks,
        ram_banks=ram_banks,
        cgb=cgb,
        gba=cgb and gba_mode,
    )


def load_rom(
    data: bytes,
    force_battery: bool = False,
    no_battery: bool = False,
    force_dmg: bool = False,
    gba_mode: bool = False,
    memfill: int = 0,
) -> Cartridge:
    """Build a cartridge from a ROM image; save RAM is filled with ``memfill`` if it is not negative."""
    header = parse_header(data, force_battery, no_battery, force_dmg, gba_mode)
    fill = memfill & 0xFF if memfill >= 0 else 0
    sram = bytearray([fill]) * header.sram_length
    return Cartridge(header=header, rom=bytes(data), sram=sram)