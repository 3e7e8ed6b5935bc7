import pytest

from famippu.rom import Mirroring, RomConfig
from famippu.vram import (
    Cartridge,
    PpuBus,
    increment_v_after_ppudata_access,
    palette_mem_addr,
    read_vram,
    vram_addr_to_nametables,
    write_vram,
)


def make_bus(mirroring=Mirroring.VERTICAL, chr_rom=None):
    return PpuBus(cart=Cartridge.from_chr(chr_rom, mirroring))


def test_vertical_mirroring():
    m = Mirroring.VERTICAL
    assert vram_addr_to_nametables(0x2000, m) == vram_addr_to_nametables(0x2800, m)
    assert vram_addr_to_nametables(0x2400, m) == vram_addr_to_nametables(0x2C00, m)
    assert vram_addr_to_nametables(0x2000, m) + 0x400 == vram_addr_to_nametables(0x2400, m)


def test_horizontal_mirroring():
    m = Mirroring.HORIZONTAL
    assert vram_addr_to_nametables(0x2000, m) == vram_addr_to_nametables(0x2400, m)
    assert vram_addr_to_nametables(0x2800, m) == vram_addr_to_nametables(0x2C00, m)
    assert vram_addr_to_nametables(0x2000, m) + 0x400 == vram_addr_to_nametables(0x2800, m)


@pytest.mark.parametrize("mirroring", [Mirroring.SINGLE_SCREEN_LOWER, Mirroring.SINGLE_SCREEN_UPPER])
def test_single_screen_maps_all_tables_together(mirroring):
    offsets = {vram_addr_to_nametables(base + 0x123, mirroring) for base in (0x2000, 0x2400, 0x2800, 0x2C00)}
    assert len(offsets) == 1


def test_single_screen_upper_and_lower_halves():
    for addr in range(0x2000, 0x3000, 0x37):
        assert vram_addr_to_nametables(addr, Mirroring.SINGLE_SCREEN_LOWER) < 0x400
        assert vram_addr_to_nametables(addr, Mirroring.SINGLE_SCREEN_UPPER) >= 0x400


@pytest.mark.parametrize("mirroring", list(Mirroring))
def test_nametable_offsets_in_range_and_mirrored_at_0x3000(mirroring):
    for addr in range(0x2000, 0x2F00, 0x11):
        offset = vram_addr_to_nametables(addr, mirroring)
        assert 0 <= offset < 2048
        assert vram_addr_to_nametables(addr + 0x1000, mirroring) == offset


def test_palette_mirrors_background_entries():
    for n in (0x00, 0x04, 0x08, 0x0C):
        assert palette_mem_addr(0x3F10 + n) == palette_mem_addr(0x3F00 + n)
    assert palette_mem_addr(0x3F11) == 0x3F11 - 0x3F00
    assert all(0 <= palette_mem_addr(a) < 32 for a in range(0x3F00, 0x3F20))


def test_nametable_round_trip_and_mirror():
    bus = make_bus(Mirroring.VERTICAL)
    write_vram(bus, 0x2005, 0xAB)
    assert read_vram(bus, 0x2005) == 0xAB
    assert read_vram(bus, 0x2805) == 0xAB
    assert read_vram(bus, 0x3005) == 0xAB
    assert read_vram(bus, 0x2405) == 0


def test_palette_write_through_mirror():
    bus = make_bus()
    write_vram(bus, 0x3F10, 0x21)
    assert read_vram(bus, 0x3F00) == 0x21


def test_greyscale_masks_palette_reads():
    bus = make_bus()
    write_vram(bus, 0x3F01, 0x3F)
    bus.ppu.greyscale = True
    assert read_vram(bus, 0x3F01) == 0x3F & 0b0011_0000


def test_addresses_above_palette_read_zero():
    bus = make_bus()
    write_vram(bus, 0x4000, 0x55)
    assert read_vram(bus, 0x4000) == 0


def test_address_bus_only_driven_below_palette():
    bus = make_bus()
    read_vram(bus, 0x2123)
    assert bus.ppu.addr_bus == 0x2123
    read_vram(bus, 0x3F05)
    assert bus.ppu.addr_bus == 0x2123
    write_vram(bus, 0x0010, 1)
    assert bus.ppu.addr_bus == 0x0010


def test_chr_ram_is_writable():
    bus = make_bus(chr_rom=None)
    write_vram(bus, 0x1234, 0x9C)
    assert read_vram(bus, 0x1234) == 0x9C
    assert len(bus.cart.chr_mem) == 0x2000


def test_chr_rom_ignores_writes():
    chr_rom = bytes(range(256)) * 32
    bus = make_bus(chr_rom=chr_rom)
    write_vram(bus, 0x0005, 0xEE)
    assert read_vram(bus, 0x0005) == chr_rom[5]
    assert read_vram(bus, 0x1FFF) == chr_rom[0x1FFF]


def test_cartridge_from_rom():
    chr_rom = bytes([7]) * 0x2000
    rom = RomConfig(0, Mirroring.HORIZONTAL, bytes(0x4000), chr_rom, False)
    cart = Cartridge.from_rom(rom)
    assert cart.mirroring() is Mirroring.HORIZONTAL
    assert cart.read_chr(0x100) == 7
    assert cart.chr_is_ram is False


def test_ppu_tick_records_address():
    cart = Cartridge.from_chr(None, Mirroring.VERTICAL)
    cart.ppu_tick(0x1FF0)
    assert cart.last_ppu_addr == 0x1FF0


def test_increment_by_one():
    bus = make_bus()
    bus.ppu.v = 0x2000
    increment_v_after_ppudata_access(bus)
    assert bus.ppu.v == 0x2001
    assert bus.ppu.addr_bus == 0x2001


def test_increment_by_row():
    bus = make_bus()
    bus.ppu.v = 0x2000
    bus.ppu.increment_select = True
    increment_v_after_ppudata_access(bus)
    assert bus.ppu.v == 0x2000 + 32


def test_increment_wraps_16_bits():
    bus = make_bus()
    bus.ppu.v = 0xFFFF
    increment_v_after_ppudata_access(bus)
    assert bus.ppu.v == 0