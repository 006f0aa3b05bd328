# dmgcore

`dmgcore` holds building blocks for an emulator of the original handheld
console and its colour successor, written in plain Python with no
dependencies outside the standard library. It covers:

- cartridge header parsing, ROM loading and battery-backed save RAM
  (`dmgcore.cartridge`);
- gzip and raw deflate decompression (`dmgcore.inflate`);
- an instruction disassembler (`dmgcore.disasm`);
- the I/O register page, interrupt lines and joypad state
  (`dmgcore.hardware`);
- a scanline renderer for background, window and sprites that writes
  RGB565 pixels into a 160x144 framebuffer (`dmgcore.lcd`).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Loading a cartridge

`load_rom` reads the cartridge header, picks the bank controller and sizes
the save RAM, filling it with the `memfill` value. A header with an unknown
ROM or RAM size raises `CartridgeError`. `decompress` unpacks a
gzip-compressed image and returns anything else unchanged.

```python
from pathlib import Path

from dmgcore.cartridge import CartridgeError, decompress, load_rom

try:
    cartridge = load_rom(decompress(Path("game.gb").read_bytes()))
except CartridgeError as exc:
    print(f"cannot load: {exc}")
```

`parse_header` gives the header alone, as a `CartridgeHeader`, and the
`MbcType` enumeration names the bank controllers a header can ask for.

Save RAM goes to and from any binary stream. `load_sram` returns `False`
for a cartridge without a battery; `save_sram` returns `False` unless the
cartridge has a battery and RAM and its save RAM was loaded first.

```python
with open("game.sav", "rb") as stream:
    cartridge.load_sram(stream)

with open("game.sav", "wb") as stream:
    cartridge.save_sram(stream)
```

## Disassembling code

`disassemble` takes any callable that maps an address to a byte, a start
address and an instruction count, and yields `Instruction` objects:

```python
from dmgcore.disasm import disassemble

code = bytes([0x3E, 0x10, 0xC3, 0x50, 0x01, 0xCB, 0x7C])
for instruction in disassemble(code.__getitem__, 0, 3):
    print(instruction.render())
```

`disassemble_one` decodes a single instruction.

## Interrupts and the joypad

`Hardware` holds the FF00 register page (indexed with the `Reg`
enumeration), the interrupt lines and the pad. `interrupt` sets lines and
raises IF bits on rising edges; `press`, `release` and `set_button` take
`Button` flags and pulse the pad interrupt when a button goes down while
its row is selected in P1.

## Rendering

`Lcd` owns video RAM, OAM and the colour palettes. Given the registers in
a `Hardware`, `refresh_line` renders line LY into `framebuffer`;
`write_vram`, `write_palette`, `write_dmg_palette` and `refresh_palettes`
keep memory and palettes up to date.

## Decompressing data

`gunzip` unpacks a gzip member and `inflate` a raw deflate stream. Bad
input raises `InflateError`.

```python
import gzip

from dmgcore.inflate import gunzip

assert gunzip(gzip.compress(b"hello")) == b"hello"
```

## What the package does not do

There is no CPU, no memory map or bank switching, no LCD controller timing
and no frame loop, so the package cannot run a game on its own, and it
provides no command-line program. Its parts are meant to be driven by code
that supplies those pieces.