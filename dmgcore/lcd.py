"""Scanline renderer: tiles, window, sprites and palettes."""

from __future__ import annotations

from dataclasses import dataclass

from .hardware import Hardware, Reg

__all__ = ["Lcd"]

WIDTH = 160
HEIGHT = 144
VBANK_SIZE = 8192

_DEFAULT_PALETTE = (0xD5F3EF, 0x7AB6A3, 0x3B6137, 0x161C04)


@dataclass
class _Sprite:
    pat: int
    x: int
    v: int
    pal: int
    pri: int


class Lcd:
    """Video memory, OAM, palettes and a 160x144 RGB565 framebuffer."""

    def __init__(self, hw: Hardware) -> None:
        self.hw = hw
        self.vram = bytearray(2 * VBANK_SIZE)
        self.oam = bytearray(256)
        self.pal = bytearray(128)
        self.pal2 = [0] * 64
        self.dmg_palettes = [list(_DEFAULT_PALETTE) for _ in range(4)]
        self.framebuffer = [[0] * WIDTH for _ in range(HEIGHT)]
        self.sprite_sort = True
        self.wy = 0
        self._row = 0
        self._disabled = False

    def reset(self) -> None:
        self.vram[:] = bytes(len(self.vram))
        self.oam[:] = bytes(256)
        self.pal[:] = bytes(128)
        self.pal2 = [0] * 64
        self.begin()
        self.refresh_palettes()

    def begin(self) -> None:
        """Start a frame at the top line, latching WY."""
        self._row = 0
        self.wy = self.hw.regs[Reg.WY]

    def tile_pixels(self, index: int, row: int) -> list[int]:
        """Colour numbers of one tile row; bits 10 and 11 flip x and y."""
        tile = index & 0x3FF
        if index & 0x800:
            row = 7 - row
        a = (tile << 4) | (row << 1)
        lo, hi = self.vram[a], self.vram[a + 1]
        pix = [((lo >> k) & 1) | (((hi >> k) & 1) << 1) for k in range(8)]
        return pix if index & 0x400 else pix[::-1]

    def _tile_row(self, base: int, start: int, count: int, wrap: bool):
        regs = self.hw.regs
        unsigned = regs[Reg.LCDC] & 0x10
        tiles = []
        for k in range(count):
            offset = base + (((start + k) & 31) if wrap else start + k)
            t = self.vram[offset]
            tile = t if unsigned else 256 + (t - 256 if t >= 0x80 else t)
            pal = 0
            if self.hw.cgb:
                attr = self.vram[VBANK_SIZE + offset]
                tile |= ((attr & 0x08) << 6) | ((attr & 0x60) << 5)
                pal = (attr & 0x07) << 2
            tiles.append((tile, pal))
        return tiles

    def _enum_sprites(self, line: int) -> list[_Sprite]:
        lcdc = self.hw.regs[Reg.LCDC]
        sprites: list[_Sprite] = []
        if not lcdc & 0x02:
            return sprites
        tall = lcdc & 0x04
        for n in range(40):
            y, x, pat, flags = self.oam[4 * n : 4 * n + 4]
            if line >= y or line + 16 < y:
                continue
            if line + 8 >= y and not tall:
                continue
            v = line - y + 16
            if self.hw.cgb:
                pat |= ((flags & 0x60) << 5) | ((flags & 0x08) << 6)
                pal = 32 + ((flags & 0x07) << 2)
            else:
                pat |= (flags & 0x60) << 5
                pal = 32 + ((flags & 0x10) >> 2)
            if tall:
                pat &= ~1
                if v >= 8:
                    v -= 8
                    pat += 1
                if flags & 0x40:
                    pat ^= 1
            sprites.append(_Sprite(pat, x - 8, v, pal, (flags & 0x80) >> 7))
            if len(sprites) == 10:
                break
        if self.sprite_sort and not self.hw.cgb:
            sprites.sort(key=lambda s: s.x)
        return sprites

    def refresh_line(self) -> None:
        """Render the current line LY into the framebuffer."""
        regs = self.hw.regs
        cgb = self.hw.cgb
        lcdc = regs[Reg.LCDC]
        line = regs[Reg.LY]
        scx = regs[Reg.SCX]
        y = (regs[Reg.SCY] + line) & 0xFF
        s, t, u, v = scx >> 3, y >> 3, scx & 7, y & 7
        wx = regs[Reg.WX] - 7
        wy = self.wy
        if wy > line or wy < 0 or wy > 143 or wx < -7 or wx > 159 or not lcdc & 0x20:
            wx = WIDTH
        wt, wv = (line - wy) >> 3, (line - wy) & 7

        if not lcdc & 0x80:
            if not self._disabled:
                for row in self.framebuffer:
                    row[:] = [0xFFFF] * WIDTH
                self._disabled = True
            return
        self._disabled = False

        sprites = self._enum_sprites(line)
        buf = [0] * 256
        pri = [0] * 256
        bg_base = 0x1C00 if lcdc & 0x08 else 0x1800
        win_base = 0x1C00 if lcdc & 0x40 else 0x1800

        if wx > 0:
            tiles = self._tile_row(bg_base + (t << 5), s, ((wx + 7) >> 3) + 1, True)
            pixels: list[int] = []
            for n, (tile, pal) in enumerate(tiles):
                row = [p | pal for p in self.tile_pixels(tile, v)]
                if n == 0:
                    row = row[u:]
                    if not cgb and len(row) >= 4:
                        row[3] = row[2]
                pixels.extend(row)
            buf[:wx] = pixels[:wx]
        if wx < WIDTH:
            count = WIDTH - wx
            tiles = self._tile_row(win_base + (wt << 5), 0, (count >> 3) + 1, False)
            pixels = []
            for tile, pal in tiles:
                pixels.extend(p | pal for p in self.tile_pixels(tile, wv))
            for x in range(max(wx, 0), WIDTH):
                buf[x] = pixels[x - wx]
            if not cgb:
                for x in range(max(wx, 0), WIDTH):
                    buf[x] |= 0x04

        if cgb and sprites:
            if wx > 0:
                attrs = self.vram[VBANK_SIZE + bg_base + (t << 5) :][:32]
                if any(a & 0x80 for a in attrs):
                    for x in range(wx):
                        pri[x] = attrs[(s + (x + u) // 8) & 31] & 0x80
            if wx < WIDTH:
                attrs = self.vram[VBANK_SIZE + win_base + (wt << 5) :][:32]
                if any(a & 0x80 for a in attrs):
                    for x in range(max(wx, 0), WIDTH):
                        pri[x] = attrs[(x - wx) // 8] & 0x80

        if sprites:
            bg = list(buf)
            for sprite in reversed(sprites):
                if sprite.x >= WIDTH or sprite.x <= -8:
                    continue
                pix = self.tile_pixels(sprite.pat, sprite.v)
                for k, b in enumerate(pix):
                    x = sprite.x + k
                    if x < 0 or x >= WIDTH or not b:
                        continue
                    if sprite.pri:
                        if bg[x] & 3:
                            continue
                    elif cgb and pri[x] and bg[x] & 3:
                        continue
                    buf[x] = sprite.pal | b

        if self._row < HEIGHT:
            self.framebuffer[self._row] = [self.pal2[c & 0x3F] for c in buf[:WIDTH]]
        self._row += 1

    def write_vram(self, address: int, value: int) -> None:
        bank = self.hw.regs[Reg.VBK] & 1
        self.vram[bank * VBANK_SIZE + (address & 0x1FFF)] = value & 0xFF

    def _update_palette(self, i: int) -> None:
        c = (self.pal[i << 1] | (self.pal[(i << 1) | 1] << 8)) & 0x7FFF
        r, g, b = c & 0x1F, (c >> 5) & 0x1F, (c >> 10) & 0x1F
        self.pal2[i] = ((r << 11) | (g << 6) | b) & 0xFFFF

    def write_palette(self, index: int, value: int) -> None:
        """Store one palette byte and recompute the colour it belongs to."""
        value &= 0xFF
        if self.pal[index] != value:
            self.pal[index] = value
            self._update_palette(index >> 1)

    def write_dmg_palette(self, index: int, mapnum: int, value: int) -> None:
        """Expand a monochrome palette register into four colour entries."""
        if self.hw.cgb:
            return
        cmap = self.dmg_palettes[mapnum & 3]
        for j in range(0, 8, 2):
            c = cmap[(value >> j) & 3]
            c = ((c & 0xF8) >> 3) | ((c & 0xF800) >> 6) | ((c & 0xF80000) >> 9)
            self.write_palette(index + j, c & 0xFF)
            self.write_palette(index + j + 1, c >> 8)

    def refresh_palettes(self) -> None:
        regs = self.hw.regs
        if not self.hw.cgb:
            self.write_dmg_palette(0, 0, regs[Reg.BGP])
            self.write_dmg_palette(8, 1, regs[Reg.BGP])
            self.write_dmg_palette(64, 2, regs[Reg.OBP0])
            self.write_dmg_palette(72, 3, regs[Reg.OBP1])
        for i in range(64):
            self._update_palette(i)