"""State of the picture processing unit."""

from __future__ import annotations

from dataclasses import dataclass, field

from famippu.util import get_bit


def _zeros(size: int):
    return field(default_factory=lambda: bytearray(size), repr=False)


@dataclass
class Ppu:
    """All registers, memories and internal latches of the PPU."""

    # PPUCTRL
    nmi_enable: bool = False
    master_slave: bool = False
    tall_sprites: bool = False
    bg_ptable_select: bool = False
    sprite_ptable_select: bool = False
    increment_select: bool = False
    ntable_select: int = 0
    # PPUMASK
    blue_emphasis: bool = False
    green_emphasis: bool = False
    red_emphasis: bool = False
    show_sprites: bool = False
    show_bg: bool = False
    show_leftmost_sprites: bool = False
    show_leftmost_bg: bool = False
    greyscale: bool = False
    # PPUSTATUS
    in_vblank: bool = False
    sprite_zero_hit: bool = False
    sprite_overflow: bool = False
    # OAMADDR
    oam_addr: int = 0
    # Memories
    vram: bytearray = _zeros(2048)
    oam: bytearray = _zeros(256)
    s_oam: bytearray = _zeros(32)
    palette_mem: bytearray = _zeros(32)
    # Rendering counters
    t: int = 0
    v: int = 0
    x: int = 0
    w: bool = False
    scanline: int = 0
    scanline_cycle: int = 27
    odd_frame: bool = False
    # Temporary background latches
    bg_ntable_tmp: int = 0
    bg_atable_tmp: int = 0
    bg_ptable_lsb_tmp: int = 0
    bg_ptable_msb_tmp: int = 0
    # Background shift registers and latches
    bg_ptable_lsb_sr: int = 0
    bg_ptable_msb_sr: int = 0
    bg_attr_lsb_sr: int = 0
    bg_attr_msb_sr: int = 0
    bg_attr_lsb_latch: bool = False
    bg_attr_msb_latch: bool = False
    # Sprite shift registers and latches
    sprite_ptable_lsb_srs: bytearray = _zeros(8)
    sprite_ptable_msb_srs: bytearray = _zeros(8)
    sprite_property_latches: bytearray = _zeros(8)
    sprite_x_counters: bytearray = _zeros(8)
    # Sprite evaluation
    in_range_counter: int = 0
    sprite_zero_in_soam: bool = False
    sprite_zero_in_latches: bool = False
    # Misc
    nmi_line: bool = False
    ppudata_buffer: int = 0
    cycles: int = 0
    addr_bus: int = 0
    dynamic_latch: int = 0

    def set_ppuctrl_from_byte(self, byte: int) -> None:
        """Update the PPUCTRL flags from a written byte."""
        self.nmi_enable = get_bit(byte, 7)
        self.master_slave = get_bit(byte, 6)
        self.tall_sprites = get_bit(byte, 5)
        self.bg_ptable_select = get_bit(byte, 4)
        self.sprite_ptable_select = get_bit(byte, 3)
        self.increment_select = get_bit(byte, 2)
        self.ntable_select = byte & 0b11

    def set_ppumask_from_byte(self, byte: int) -> None:
        """Update the PPUMASK flags from a written byte."""
        self.blue_emphasis = get_bit(byte, 7)
        self.green_emphasis = get_bit(byte, 6)
        self.red_emphasis = get_bit(byte, 5)
        self.show_sprites = get_bit(byte, 4)
        self.show_bg = get_bit(byte, 3)
        self.show_leftmost_sprites = get_bit(byte, 2)
        self.show_leftmost_bg = get_bit(byte, 1)
        self.greyscale = get_bit(byte, 0)

    def ppustatus_byte(self) -> int:
        """Return the upper three bits of PPUSTATUS built from the flags."""
        return (
            int(self.in_vblank) << 7
            | int(self.sprite_zero_hit) << 6
            | int(self.sprite_overflow) << 5
        )