"""Interrupt lines, joypad state and the I/O register file."""

from __future__ import annotations

from enum import IntEnum, IntFlag

__all__ = ["Button", "Interrupt", "Reg", "Hardware"]


class Button(IntFlag):
    """Joypad buttons as bits of the pad state."""

    RIGHT = 0x01
    LEFT = 0x02
    UP = 0x04
    DOWN = 0x08
    A = 0x10
    B = 0x20
    SELECT = 0x40
    START = 0x80


class Interrupt(IntFlag):
    """Interrupt request bits as they appear in IF and IE."""

    VBLANK = 0x01
    STAT = 0x02
    TIMER = 0x04
    SERIAL = 0x08
    PAD = 0x10


class Reg(IntEnum):
    """Offsets of the I/O registers within the FF00 page."""

    P1 = 0x00
    SB = 0x01
    SC = 0x02
    DIV = 0x04
    TIMA = 0x05
    TMA = 0x06
    TAC = 0x07
    IF = 0x0F
    LCDC = 0x40
    STAT = 0x41
    SCY = 0x42
    SCX = 0x43
    LY = 0x44
    LYC = 0x45
    DMA = 0x46
    BGP = 0x47
    OBP0 = 0x48
    OBP1 = 0x49
    WY = 0x4A
    WX = 0x4B
    KEY1 = 0x4D
    VBK = 0x4F
    HDMA1 = 0x51
    HDMA2 = 0x52
    HDMA3 = 0x53
    HDMA4 = 0x54
    HDMA5 = 0x55
    RP = 0x56
    BCPS = 0x68
    BCPD = 0x69
    OCPS = 0x6A
    OCPD = 0x6B
    SVBK = 0x70
    IE = 0xFF


class Hardware:
    """Shared machine state: the FF00 page, interrupt lines and pad."""

    def __init__(self, cgb: bool = False, gba: bool = False) -> None:
        self.regs = bytearray(256)
        self.ilines = 0
        self.pad = 0
        self.cgb = cgb
        self.gba = gba
        self.hdma = 0
        self.ime = False
        self.halt = False

    def reset(self) -> None:
        """Put the lines, pad and registers into their power-on state."""
        self.ilines = 0
        self.pad = 0
        self.regs[:] = bytes(256)
        self.regs[Reg.P1] = 0xFF
        self.regs[Reg.LCDC] = 0x91
        self.regs[Reg.BGP] = 0xFC
        self.regs[Reg.OBP0] = 0xFF
        self.regs[Reg.OBP1] = 0xFF
        self.regs[Reg.SVBK] = 0x01
        self.regs[Reg.HDMA5] = 0xFF
        self.regs[Reg.VBK] = 0xFE

    def interrupt(self, lines: int, mask: int) -> None:
        """Set the lines in ``mask`` to ``lines``; rising edges raise IF bits."""
        old_if = self.regs[Reg.IF]
        lines &= 0x1F & mask
        self.regs[Reg.IF] |= lines & (self.ilines ^ lines)
        new_if = self.regs[Reg.IF]
        if (new_if & (new_if ^ old_if) & self.regs[Reg.IE]) and self.ime:
            self.halt = False
        self.ilines &= ~mask & 0xFF
        self.ilines |= lines

    def pad_refresh(self) -> None:
        """Update P1 from the pad, pulsing the pad interrupt on a new press."""
        old = self.regs[Reg.P1]
        p1 = (old & 0x30) | 0xC0
        if not p1 & 0x10:
            p1 |= self.pad & 0x0F
        if not p1 & 0x20:
            p1 |= self.pad >> 4
        p1 ^= 0x0F
        self.regs[Reg.P1] = p1
        if old & ~p1 & 0x0F:
            self.interrupt(Interrupt.PAD, Interrupt.PAD)
            self.interrupt(0, Interrupt.PAD)

    def press(self, buttons: int) -> None:
        if self.pad & buttons:
            return
        self.pad |= buttons
        self.pad_refresh()

    def release(self, buttons: int) -> None:
        if not self.pad & buttons:
            return
        self.pad &= ~buttons & 0xFF
        self.pad_refresh()

    def set_button(self, buttons: int, pressed: bool) -> None:
        if pressed:
            self.press(buttons)
        else:
            self.release(buttons)