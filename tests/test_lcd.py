from dmgcore.hardware import Hardware, Reg
from dmgcore.lcd import Lcd


def make(cgb=False):
    hw = Hardware(cgb=cgb)
    hw.reset()
    lcd = Lcd(hw)
    lcd.reset()
    return hw, lcd


def test_tile_pixels_and_flips():
    _, lcd = make()
    lcd.write_vram(0, 0x80)
    lcd.write_vram(1, 0x80)
    assert lcd.tile_pixels(0, 0) == [3, 0, 0, 0, 0, 0, 0, 0]
    assert lcd.tile_pixels(0x400, 0) == [0, 0, 0, 0, 0, 0, 0, 3]
    assert lcd.tile_pixels(0x800, 7) == lcd.tile_pixels(0, 0)


def test_write_palette_red():
    _, lcd = make(cgb=True)
    lcd.write_palette(0, 0x1F)
    lcd.write_palette(1, 0x00)
    assert lcd.pal2[0] == 0xF800


def test_dmg_palette_ignored_on_cgb():
    _, lcd = make(cgb=True)
    before = bytes(lcd.pal)
    lcd.write_dmg_palette(0, 0, 0xE4)
    assert bytes(lcd.pal) == before


def test_lcd_off_fills_white():
    hw, lcd = make()
    hw.regs[Reg.LCDC] = 0x00
    lcd.refresh_line()
    assert all(p == 0xFFFF for row in lcd.framebuffer for p in row)


def test_blank_line_uses_colour_zero():
    hw, lcd = make()
    lcd.refresh_line()
    assert lcd.framebuffer[0] == [lcd.pal2[0]] * 160


def test_sprite_drawn_over_background():
    hw, lcd = make()
    hw.regs[Reg.LCDC] = 0x93
    lcd.write_vram(16, 0xFF)
    lcd.write_vram(17, 0xFF)
    lcd.oam[0:4] = bytes([16, 8, 1, 0])
    lcd.refresh_line()
    assert lcd.framebuffer[0][:8] == [lcd.pal2[35]] * 8
    assert lcd.framebuffer[0][8] == lcd.pal2[0]


def test_write_vram_respects_bank():
    hw, lcd = make(cgb=True)
    hw.regs[Reg.VBK] = 0xFF
    lcd.write_vram(5, 0x42)
    assert lcd.vram[8192 + 5] == 0x42
    assert lcd.vram[5] == 0