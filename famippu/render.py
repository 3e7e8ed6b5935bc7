"""One PPU clock: background and sprite fetches, pixel output and timing."""

from __future__ import annotations

from famippu.util import flip_byte, get_bit, get_bit_u16
from famippu.vram import PpuBus, read_vram

PALETTE: tuple[tuple[int, int, int], ...] = (
    (84, 84, 84), (0, 30, 116), (8, 16, 144), (48, 0, 136),
    (68, 0, 100), (92, 0, 48), (84, 4, 0), (60, 24, 0),
    (32, 42, 0), (8, 58, 0), (0, 64, 0), (0, 60, 0),
    (0, 50, 60), (0, 0, 0), (0, 0, 0), (0, 0, 0),
    (152, 150, 152), (8, 76, 196), (48, 50, 236), (92, 30, 228),
    (136, 20, 176), (160, 20, 100), (152, 34, 32), (120, 60, 0),
    (84, 90, 0), (40, 114, 0), (8, 124, 0), (0, 118, 40),
    (0, 102, 120), (0, 0, 0), (0, 0, 0), (0, 0, 0),
    (236, 238, 236), (76, 154, 236), (120, 124, 236), (176, 98, 236),
    (228, 84, 236), (236, 88, 180), (236, 106, 100), (212, 136, 32),
    (160, 170, 0), (116, 196, 0), (76, 208, 32), (56, 204, 108),
    (56, 180, 204), (60, 60, 60), (0, 0, 0), (0, 0, 0),
    (236, 238, 236), (168, 204, 236), (188, 188, 236), (212, 178, 236),
    (236, 174, 236), (236, 174, 212), (236, 180, 176), (228, 196, 144),
    (204, 210, 120), (180, 222, 120), (168, 226, 144), (152, 226, 180),
    (160, 214, 228), (160, 162, 160), (0, 0, 0), (0, 0, 0),
)

NAMETABLE = 0b000_11_00000_00000
NAMETABLE_MSB = 0b000_10_00000_00000
NAMETABLE_LSB = 0b000_01_00000_00000
COARSE_X = 0b000_00_00000_11111
COARSE_Y = 0b000_00_11111_00000
FINE_Y = 0b111_00_00000_00000

_NAMETABLE_READ = 1
_ATTRIBUTE_READ = 3
_PATTERN_LSB_READ = 5
_PATTERN_MSB_READ = 7

_HORIZONTAL_BITMASK = NAMETABLE_LSB | COARSE_X
_VERTICAL_BITMASK = FINE_Y | NAMETABLE_MSB | COARSE_Y

__all__ = [
    "PALETTE",
    "NAMETABLE",
    "NAMETABLE_MSB",
    "NAMETABLE_LSB",
    "COARSE_X",
    "COARSE_Y",
    "FINE_Y",
    "step_ppu",
    "inc_v_horizontal",
    "inc_v_vertical",
]


def inc_v_horizontal(ppu) -> None:
    """Advance coarse X in v, wrapping into the neighbouring nametable."""
    if ppu.v & COARSE_X == 31:
        ppu.v &= ~COARSE_X & 0xFFFF
        ppu.v ^= NAMETABLE_LSB
    else:
        ppu.v = (ppu.v + 1) & 0xFFFF


def inc_v_vertical(ppu) -> None:
    """Advance fine Y in v, carrying into coarse Y and the nametable bit."""
    if (ppu.v & FINE_Y) >> 12 == 7:
        ppu.v &= ~FINE_Y & 0xFFFF
        coarse_y = (ppu.v & COARSE_Y) >> 5
        if coarse_y == 29:
            ppu.v &= ~COARSE_Y & 0xFFFF
            ppu.v ^= NAMETABLE_MSB
        elif coarse_y == 31:
            ppu.v &= ~COARSE_Y & 0xFFFF
        else:
            ppu.v = (ppu.v + 0b000_00_00001_00000) & 0xFFFF
    else:
        ppu.v = (ppu.v + 0b001_00_00000_00000) & 0xFFFF


def _evaluate_sprites(ppu) -> None:
    sprite_height = 16 if ppu.tall_sprites else 8
    ppu.in_range_counter = 0
    for n in range(0, 256, 4):
        if ppu.in_range_counter >= 8:
            break
        sprite_y = ppu.oam[n]
        if sprite_y <= ppu.scanline < sprite_y + sprite_height:
            if n == 0:
                ppu.sprite_zero_in_soam = True
            start = ppu.in_range_counter * 4
            ppu.s_oam[start:start + 4] = ppu.oam[n:n + 4]
            ppu.in_range_counter += 1


def _emphasise(ppu, rgb: tuple[int, int, int]) -> tuple[int, int, int]:
    r, g, b = rgb
    dr, dg, db = r // 4, g // 4, b // 4

    def up(value: int, delta: int) -> int:
        return min(255, value + delta)

    def down(value: int, delta: int) -> int:
        return max(0, value - delta)

    if ppu.red_emphasis:
        r, g, b = up(r, dr), down(g, dg), down(b, db)
    if ppu.green_emphasis:
        r, g, b = down(r, dr), up(g, dg), down(b, db)
    if ppu.blue_emphasis:
        r, g, b = down(r, dr), down(g, dg), up(b, db)
    return r, g, b


def _draw_pixel(bus: PpuBus, cycle: int) -> None:
    ppu = bus.ppu

    if cycle == 1:
        ppu.s_oam[:] = b"\xff" * 32
    if cycle == 65:
        _evaluate_sprites(ppu)

    sprite_patt_lsb = False
    sprite_patt_msb = False
    sprite_palette_number = 0
    draw_sprite_behind = True
    sprite_number = None

    for i in range(8):
        if ppu.sprite_x_counters[i] != 0:
            continue
        patt_lsb = get_bit(ppu.sprite_ptable_lsb_srs[i], 7)
        patt_msb = get_bit(ppu.sprite_ptable_msb_srs[i], 7)
        if patt_lsb or patt_msb:
            properties = ppu.sprite_property_latches[i]
            sprite_patt_lsb = patt_lsb
            sprite_patt_msb = patt_msb
            sprite_palette_number = properties & 0b11
            draw_sprite_behind = get_bit(properties, 5)
            sprite_number = i
            break

    bg_patt_lsb = get_bit_u16(ppu.bg_ptable_lsb_sr, 15 - ppu.x)
    bg_patt_msb = get_bit_u16(ppu.bg_ptable_msb_sr, 15 - ppu.x)

    for i in range(8):
        if ppu.sprite_x_counters[i] == 0:
            ppu.sprite_ptable_lsb_srs[i] = (ppu.sprite_ptable_lsb_srs[i] << 1) & 0xFF
            ppu.sprite_ptable_msb_srs[i] = (ppu.sprite_ptable_msb_srs[i] << 1) & 0xFF
        else:
            ppu.sprite_x_counters[i] -= 1

    bg_transparent = (
        (not bg_patt_lsb and not bg_patt_msb)
        or (not ppu.show_leftmost_bg and cycle <= 8)
        or not ppu.show_bg
    )
    sprite_transparent = (
        (not sprite_patt_lsb and not sprite_patt_msb)
        or (not ppu.show_leftmost_sprites and cycle <= 8)
        or not ppu.show_sprites
    )

    if (
        not bg_transparent
        and not sprite_transparent
        and cycle < 256
        and sprite_number == 0
        and ppu.sprite_zero_in_latches
        and not (cycle <= 8 and (not ppu.show_leftmost_bg or not ppu.show_leftmost_sprites))
    ):
        ppu.sprite_zero_hit = True

    if bg_transparent and sprite_transparent:
        palette_index = 0x3F00
    elif not sprite_transparent and (bg_transparent or not draw_sprite_behind):
        palette_index = (
            0x3F10
            | (sprite_palette_number << 2)
            | (int(sprite_patt_msb) << 1)
            | int(sprite_patt_lsb)
        )
    else:
        lsb_attr = int(get_bit(ppu.bg_attr_lsb_sr, 7 - ppu.x))
        msb_attr = int(get_bit(ppu.bg_attr_msb_sr, 7 - ppu.x))
        palette_index = (
            0x3F00
            | (msb_attr << 3)
            | (lsb_attr << 2)
            | (int(bg_patt_msb) << 1)
            | int(bg_patt_lsb)
        )

    frame_index = (ppu.scanline * 256 + ppu.scanline_cycle - 1) * 4
    hue = read_vram(bus, palette_index) & 0b0011_1111
    r, g, b = _emphasise(ppu, PALETTE[hue])

    if bus.frame is not None:
        bus.frame[frame_index:frame_index + 4] = bytes((r, g, b, 255))

    if cycle == 256:
        ppu.sprite_zero_in_latches = False


def _reload_shift_registers(ppu) -> None:
    ppu.bg_ptable_lsb_sr = (ppu.bg_ptable_lsb_sr | ppu.bg_ptable_lsb_tmp) & 0xFFFF
    ppu.bg_ptable_msb_sr = (ppu.bg_ptable_msb_sr | ppu.bg_ptable_msb_tmp) & 0xFFFF

    left_num = (((ppu.v & COARSE_X) - 1) & 0xFFFF) // 2
    top_num = ((ppu.v & COARSE_Y) >> 5) // 2
    is_top = top_num % 2 == 0
    is_left = left_num % 2 == 0

    shift = (0 if is_top else 4) + (0 if is_left else 2)
    attr = ppu.bg_atable_tmp
    ppu.bg_attr_lsb_latch = get_bit(attr, shift)
    ppu.bg_attr_msb_latch = get_bit(attr, shift + 1)


def _fetch_background(bus: PpuBus, cycle: int) -> None:
    ppu = bus.ppu
    phase = cycle % 8
    if phase == _NAMETABLE_READ:
        ntable_address = 0x2000 | (ppu.v & ~FINE_Y & 0xFFFF)
        ppu.bg_ntable_tmp = read_vram(bus, ntable_address)
    elif phase == _ATTRIBUTE_READ:
        attribute_addr = (
            0x23C0
            | (ppu.v & NAMETABLE)
            | ((ppu.v & 0b11100_00000) >> 4)
            | ((ppu.v & 0b00000_11100) >> 2)
        )
        ppu.bg_atable_tmp = read_vram(bus, attribute_addr)
    elif phase in (_PATTERN_LSB_READ, _PATTERN_MSB_READ):
        tile_addr = (
            (int(ppu.bg_ptable_select) << 12)
            | (ppu.bg_ntable_tmp << 4)
            | ((ppu.v & FINE_Y) >> 12)
        )
        if phase == _PATTERN_LSB_READ:
            ppu.bg_ptable_lsb_tmp = read_vram(bus, tile_addr)
        else:
            ppu.bg_ptable_msb_tmp = read_vram(bus, tile_addr + 8)


def _fetch_sprite(bus: PpuBus, cycle: int, scanline: int) -> None:
    ppu = bus.ppu
    current = (cycle - 257) // 8

    if ppu.sprite_zero_in_soam and scanline > 0:
        ppu.sprite_zero_in_soam = False
        ppu.sprite_zero_in_latches = True

    sprite_y, tile_index, properties, sprite_x = ppu.s_oam[current * 4:current * 4 + 4]

    ppu.sprite_property_latches[current] = properties
    ppu.sprite_x_counters[current] = sprite_x

    if ppu.tall_sprites:
        ptable_select = (tile_index & 1) == 1
        tile_index &= 0b1111_1110
    else:
        ptable_select = ppu.sprite_ptable_select

    vertically_flipped = (properties >> 7) == 1
    tile_y = ppu.scanline - sprite_y

    if not vertically_flipped:
        offset = tile_y + (8 if ppu.tall_sprites and tile_y >= 8 else 0)
    elif not ppu.tall_sprites:
        offset = 7 - tile_y
    elif tile_y < 8:
        # top tile: invert, then move to the bottom tile
        offset = (7 - tile_y) + 16
    else:
        # bottom tile: move back to the top tile, then invert
        offset = 7 - (tile_y - 8)

    tile_addr = (int(ptable_select) << 12) | (
        ((tile_index << 4) + (offset & 0xFFFF)) & 0xFFFF
    )
    flip_horizontally = bool(properties & 0b0100_0000)

    phase = cycle % 8
    if phase not in (_PATTERN_LSB_READ, _PATTERN_MSB_READ):
        return
    addr = tile_addr if phase == _PATTERN_LSB_READ else (tile_addr + 8) & 0xFFFF
    data = read_vram(bus, addr)
    if current >= ppu.in_range_counter:
        data = 0
    if flip_horizontally:
        data = flip_byte(data)
    if phase == _PATTERN_LSB_READ:
        ppu.sprite_ptable_lsb_srs[current] = data
    else:
        ppu.sprite_ptable_msb_srs[current] = data


def step_ppu(bus: PpuBus) -> None:
    """Run the PPU for a single dot."""
    ppu = bus.ppu
    bus.cart.ppu_tick(ppu.addr_bus)

    cycle = ppu.scanline_cycle
    scanline = ppu.scanline
    rendering_enabled = ppu.show_bg or ppu.show_sprites

    if 2 <= cycle <= 257 or 322 <= cycle <= 337:
        ppu.bg_ptable_lsb_sr = (ppu.bg_ptable_lsb_sr << 1) & 0xFFFF
        ppu.bg_ptable_msb_sr = (ppu.bg_ptable_msb_sr << 1) & 0xFFFF
        ppu.bg_attr_lsb_sr = ((ppu.bg_attr_lsb_sr << 1) & 0xFF) | int(ppu.bg_attr_lsb_latch)
        ppu.bg_attr_msb_sr = ((ppu.bg_attr_msb_sr << 1) & 0xFF) | int(ppu.bg_attr_msb_latch)

    if 1 <= cycle <= 256 and 0 <= scanline <= 239 and rendering_enabled:
        _draw_pixel(bus, cycle)
    elif scanline == 241 and cycle == 1:
        ppu.in_vblank = True
        if ppu.nmi_enable:
            ppu.nmi_line = True
    elif scanline == -1 and cycle == 1:
        ppu.in_vblank = False
        ppu.sprite_zero_hit = False
        ppu.nmi_line = False

    if (cycle % 8 == 1 and 9 <= cycle <= 257) or cycle in (329, 337):
        _reload_shift_registers(ppu)

    visible_or_prerender = scanline <= 239

    if (
        (1 <= cycle <= 256 or 321 <= cycle <= 336)
        and visible_or_prerender
        and rendering_enabled
    ):
        _fetch_background(bus, cycle)

    if 257 <= cycle <= 320 and visible_or_prerender and rendering_enabled:
        _fetch_sprite(bus, cycle, scanline)

    horizontal_v_increment = (
        ((cycle % 8 == 0 and 8 <= cycle <= 256) or cycle in (328, 336))
        and visible_or_prerender
    )
    if horizontal_v_increment and rendering_enabled:
        inc_v_horizontal(ppu)

    if cycle == 256 and visible_or_prerender and rendering_enabled:
        inc_v_vertical(ppu)

    if cycle == 257 and visible_or_prerender and rendering_enabled:
        ppu.v &= ~_HORIZONTAL_BITMASK & 0xFFFF
        ppu.v |= ppu.t & _HORIZONTAL_BITMASK

    if 280 <= cycle <= 304 and scanline == -1 and rendering_enabled:
        ppu.v &= ~_VERTICAL_BITMASK & 0xFFFF
        ppu.v |= ppu.t & _VERTICAL_BITMASK

    if ppu.odd_frame and ppu.scanline_cycle == 339 and ppu.scanline == -1 and rendering_enabled:
        # Skip the last pre-render dot on odd frames.
        ppu.scanline_cycle = 0
        ppu.scanline = 0
        ppu.odd_frame = not ppu.odd_frame
    elif ppu.scanline_cycle < 340:
        ppu.scanline_cycle += 1
    else:
        ppu.scanline_cycle = 0
        if ppu.scanline < 260:
            ppu.scanline += 1
        else:
            # The pre-render line is numbered -1 rather than 261.
            ppu.scanline = -1
            ppu.odd_frame = not ppu.odd_frame
    ppu.cycles += 1