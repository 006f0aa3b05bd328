import gzip
import io

import pytest

from dmgcore.cartridge import (
    Cartridge,
    CartridgeError,
    MbcType,
    decompress,
    load_rom,
    parse_header,
)


def make_rom(
    title: bytes = b"TESTGAME",
    cart_type: int = 0x00,
    rom_size: int = 0x00,
    ram_size: int = 0x00,
    cgb_flag: int = 0x00,
) -> bytes:
    image = bytearray(0x8000)
    image[0x134 : 0x134 + len(title)] = title
    image[0x143] = cgb_flag
    image[0x147] = cart_type
    image[0x148] = rom_size
    image[0x149] = ram_size
    return bytes(image)


def test_title_is_read_up_to_nul():
    header = parse_header(make_rom(title=b"TESTGAME"))
    assert header.name == "TESTGAME"


def test_rom_length_matches_32k_image():
    image = make_rom()
    assert parse_header(image).rom_length == len(image)


@pytest.mark.parametrize(
    "cart_type, mbc",
    [
        (0x00, MbcType.NONE),
        (0x01, MbcType.MBC1),
        (0x06, MbcType.MBC2),
        (0x13, MbcType.MBC3),
        (0x1B, MbcType.MBC5),
        (0x1C, MbcType.RUMBLE),
        (0xFE, MbcType.HUC3),
        (0xFF, MbcType.HUC1),
        (0x20, MbcType.NONE),
    ],
)
def test_mbc_type(cart_type, mbc):
    assert parse_header(make_rom(cart_type=cart_type)).mbc is mbc


def test_battery_and_rtc_flags():
    header = parse_header(make_rom(cart_type=0x10))
    assert header.battery is True
    assert header.rtc is True
    assert header.mbc is MbcType.MBC3


def test_no_battery_and_force_battery():
    assert parse_header(make_rom(cart_type=0x03), no_battery=True).battery is False
    assert parse_header(make_rom(cart_type=0x00)).battery is False
    assert parse_header(make_rom(cart_type=0x00), force_battery=True).battery is True


@pytest.mark.parametrize("flag", [0x80, 0xC0])
def test_cgb_detection(flag):
    assert parse_header(make_rom(cgb_flag=flag)).cgb is True
    assert parse_header(make_rom(cgb_flag=flag), force_dmg=True).cgb is False


def test_gba_mode_needs_cgb():
    assert parse_header(make_rom(cgb_flag=0x80), gba_mode=True).gba is True
    assert parse_header(make_rom(cgb_flag=0x00), gba_mode=True).gba is False


def test_unknown_rom_size():
    with pytest.raises(CartridgeError):
        parse_header(make_rom(rom_size=0x09))


def test_unknown_ram_size():
    with pytest.raises(CartridgeError):
        parse_header(make_rom(ram_size=0x06))


def test_truncated_image():
    with pytest.raises(CartridgeError):
        parse_header(b"\x00" * 0x100)


def test_sram_sized_and_filled():
    cartridge = load_rom(make_rom(ram_size=0x03), memfill=0xFF)
    assert len(cartridge.sram) == cartridge.header.sram_length
    assert set(cartridge.sram) == {0xFF}
    assert cartridge.header.sram_length > 0


def test_negative_memfill_leaves_zeroes():
    cartridge = load_rom(make_rom(), memfill=-1)
    assert cartridge.sram == bytearray(cartridge.header.sram_length)


def test_rom_bytes_kept():
    image = make_rom()
    assert load_rom(image).rom == image


def test_load_sram_without_battery():
    cartridge = load_rom(make_rom(cart_type=0x01))
    assert cartridge.load_sram(io.BytesIO(b"\x01\x02")) is False
    assert cartridge.sram_loaded is False


def test_save_refused_before_load():
    cartridge = load_rom(make_rom(cart_type=0x03))
    out = io.BytesIO()
    assert cartridge.save_sram(out) is False
    assert out.getvalue() == b""


def test_sram_round_trip():
    cartridge = load_rom(make_rom(cart_type=0x03, ram_size=0x02))
    content = bytes(index % 251 for index in range(cartridge.header.sram_length))
    assert cartridge.load_sram(io.BytesIO(content)) is True
    out = io.BytesIO()
    assert cartridge.save_sram(out) is True
    assert out.getvalue() == content


def test_load_sram_from_nothing_marks_loaded():
    cartridge = load_rom(make_rom(cart_type=0x03))
    assert cartridge.load_sram(None) is True
    assert cartridge.sram_loaded is True
    assert cartridge.save_sram(None) is True


def test_short_sram_file_fills_prefix():
    cartridge = load_rom(make_rom(cart_type=0x03), memfill=0)
    cartridge.load_sram(io.BytesIO(b"\xaa\xbb"))
    assert cartridge.sram[:2] == b"\xaa\xbb"
    assert set(cartridge.sram[2:]) == {0}


def test_decompress_passes_plain_data_through():
    image = make_rom()
    assert decompress(image) is image


def test_decompress_gzip_round_trip():
    image = make_rom(title=b"ZIPPED")
    assert decompress(gzip.compress(image)) == image


def test_decompress_returns_original_on_bad_stream():
    broken = b"\x1f\x8b\x08\x00" + b"\x00" * 6 + b"\xff"
    assert decompress(broken) == broken


def test_cartridge_holds_header():
    image = make_rom(cart_type=0x19)
    cartridge = load_rom(image)
    assert isinstance(cartridge, Cartridge)
    assert cartridge.header == parse_header(image)
    assert cartridge.header.mbc is MbcType.MBC5