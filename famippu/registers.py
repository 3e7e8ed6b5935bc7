"""The PPU's memory-mapped registers as the CPU sees them at 0x2000-0x3FFF."""

from __future__ import annotations

from famippu.render import COARSE_X, COARSE_Y, FINE_Y, NAMETABLE
from famippu.vram import (
    PpuBus,
    increment_v_after_ppudata_access,
    read_vram,
    write_vram,
)

PPUCTRL = 0x2000
PPUMASK = 0x2001
PPUSTATUS = 0x2002
OAMADDR = 0x2003
OAMDATA = 0x2004
PPUSCROLL = 0x2005
PPUADDR = 0x2006
PPUDATA = 0x2007

REGISTER_START = 0x2000
REGISTER_END = 0x3FFF

PPU_WARMUP = 29658
"""CPU cycles after power-on during which some PPU register writes are ignored."""

__all__ = [
    "PPUCTRL",
    "PPUMASK",
    "PPUSTATUS",
    "OAMADDR",
    "OAMDATA",
    "PPUSCROLL",
    "PPUADDR",
    "PPUDATA",
    "PPU_WARMUP",
    "read_register",
    "write_register",
]


def _register_for(addr: int) -> int:
    if not REGISTER_START <= addr <= REGISTER_END:
        raise ValueError(f"address {addr:#06x} is not a PPU register")
    # The eight registers are mirrored every 8 bytes through the range.
    return REGISTER_START + addr % 8


def _read_ppudata(bus: PpuBus, addr: int, safe_read: bool) -> int:
    ppu = bus.ppu
    if addr < 0x3F00:
        previous = ppu.ppudata_buffer
        if not safe_read:
            ppu.ppudata_buffer = read_vram(bus, ppu.v)
            increment_v_after_ppudata_access(bus)
            ppu.dynamic_latch = previous
        return previous

    # Palette data is returned directly; the buffer gets the nametable byte beneath it.
    data = read_vram(bus, ppu.v)
    if not safe_read:
        ppu.ppudata_buffer = read_vram(bus, (ppu.v - 0x1000) & 0xFFFF)
        increment_v_after_ppudata_access(bus)
        ppu.dynamic_latch = data
    return data


def read_register(bus: PpuBus, addr: int, safe_read: bool = False) -> int:
    """Read a PPU register at CPU address ``addr``.

    A safe read returns the same value but leaves every side effect undone,
    which is what a debugger needs.
    """
    register = _register_for(addr)
    ppu = bus.ppu

    if register in (PPUCTRL, PPUMASK, OAMADDR, PPUSCROLL, PPUADDR):
        return ppu.dynamic_latch

    if register == PPUSTATUS:
        status = ppu.ppustatus_byte() | (ppu.dynamic_latch & 0b0001_1111)
        if not safe_read:
            ppu.in_vblank = False
            ppu.w = False
            ppu.dynamic_latch = status
        return status

    if register == OAMDATA:
        value = ppu.oam_addr
        if not safe_read:
            ppu.dynamic_latch = value
        return value

    return _read_ppudata(bus, addr, safe_read)


def _write_scroll(ppu, val: int) -> None:
    if not ppu.w:
        ppu.t &= ~COARSE_X & 0xFFFF
        ppu.t |= val >> 3
        ppu.x = val & 0b111
    else:
        ppu.t &= ~(COARSE_Y | FINE_Y) & 0xFFFF
        ppu.t |= (val & 0b11111_000) << 2
        ppu.t |= (val & 0b00000_111) << 12
    ppu.w = not ppu.w


def _write_addr(ppu, val: int) -> None:
    if not ppu.w:
        ppu.t &= 0b000000_11111111
        ppu.t |= (val & 0b111111) << 8
    else:
        ppu.t &= 0b111111_00000000
        ppu.t |= val
        ppu.v = ppu.t
        ppu.addr_bus = ppu.v
    ppu.w = not ppu.w


def write_register(
    bus: PpuBus, addr: int, val: int, cpu_cycles: int = PPU_WARMUP
) -> None:
    """Write ``val`` to the PPU register at CPU address ``addr``.

    ``cpu_cycles`` is the CPU cycle count at the time of the write; before
    the warm-up period has passed, writes to PPUCTRL, PPUMASK, PPUSCROLL and
    PPUADDR only reach the open-bus latch.
    """
    register = _register_for(addr)
    ppu = bus.ppu
    val &= 0xFF
    ppu.dynamic_latch = val
    warming_up = cpu_cycles < PPU_WARMUP

    if register == PPUCTRL:
        if warming_up:
            return
        ppu.set_ppuctrl_from_byte(val)
        ppu.t &= ~NAMETABLE & 0xFFFF
        ppu.t |= (val & 0b11) << 10
    elif register == PPUMASK:
        if warming_up:
            return
        ppu.set_ppumask_from_byte(val)
    elif register == OAMADDR:
        ppu.oam_addr = val
    elif register == OAMDATA:
        ppu.oam[ppu.oam_addr] = val
        ppu.oam_addr = (ppu.oam_addr + 1) & 0xFF
    elif register == PPUSCROLL:
        if warming_up:
            return
        _write_scroll(ppu, val)
    elif register == PPUADDR:
        if warming_up:
            return
        _write_addr(ppu, val)
    elif register == PPUDATA:
        write_vram(bus, ppu.v, val)
        increment_v_after_ppudata_access(bus)