"""The PPU's view of memory: pattern tables, nametables and palettes."""

from __future__ import annotations

from dataclasses import dataclass, field

from famippu.ppu import Ppu
from famippu.rom import Mirroring, RomConfig

CHR_RAM_SIZE = 0x2000


@dataclass
class Cartridge:
    """Pattern table memory and nametable mirroring of a simple cartridge."""

    chr_mem: bytearray
    mirroring_mode: Mirroring
    chr_is_ram: bool = False
    last_ppu_addr: int = 0

    @classmethod
    def from_chr(cls, chr_rom: bytes | None, mirroring: Mirroring) -> "Cartridge":
        """Build a cartridge; without CHR ROM it gets 8 KiB of CHR RAM."""
        if chr_rom is None:
            return cls(bytearray(CHR_RAM_SIZE), mirroring, chr_is_ram=True)
        return cls(bytearray(chr_rom), mirroring)

    @classmethod
    def from_rom(cls, rom: RomConfig) -> "Cartridge":
        return cls.from_chr(rom.chr_rom, rom.mirroring)

    def read_chr(self, addr: int) -> int:
        return self.chr_mem[addr % len(self.chr_mem)]

    def write_chr(self, addr: int, val: int) -> None:
        if self.chr_is_ram:
            self.chr_mem[addr % len(self.chr_mem)] = val & 0xFF

    def mirroring(self) -> Mirroring:
        return self.mirroring_mode

    def ppu_tick(self, addr_bus: int) -> None:
        """Observe the PPU address bus once per PPU cycle."""
        self.last_ppu_addr = addr_bus


@dataclass
class PpuBus:
    """The PPU together with the cartridge it reads from and its frame buffer."""

    cart: Cartridge
    ppu: Ppu = field(default_factory=Ppu)
    frame: bytearray | None = None


def palette_mem_addr(addr: int) -> int:
    """Map a palette address 0x3F00-0x3F1F to an index into palette memory."""
    offset = addr - 0x3F00
    if offset > 0xF and offset % 4 == 0:
        return offset - 0x10
    return offset


def vram_addr_to_nametables(addr: int, mirroring: Mirroring) -> int:
    """Map a nametable address to an offset into the 2 KiB of physical VRAM."""
    truncated = addr & 0x0FFF
    if mirroring is Mirroring.VERTICAL:
        return truncated % 0x800
    if mirroring is Mirroring.HORIZONTAL:
        return (truncated // 0x800) * 0x400 + truncated % 0x400
    if mirroring is Mirroring.SINGLE_SCREEN_LOWER:
        return truncated % 0x400
    return 0x400 + truncated % 0x400


def read_vram(bus: PpuBus, addr: int) -> int:
    """Read a byte from PPU address space."""
    ppu = bus.ppu
    # Palette reads do not drive the address bus.
    if addr < 0x3F00:
        ppu.addr_bus = addr
    if 0x0000 <= addr <= 0x1FFF:
        return bus.cart.read_chr(addr)
    if 0x2000 <= addr <= 0x3EFF:
        return ppu.vram[vram_addr_to_nametables(addr, bus.cart.mirroring())]
    if 0x3F00 <= addr <= 0x3F1F:
        colour = ppu.palette_mem[palette_mem_addr(addr)]
        if ppu.greyscale:
            colour &= 0b0011_0000
        return colour
    return 0


def write_vram(bus: PpuBus, addr: int, val: int) -> None:
    """Write a byte into PPU address space."""
    ppu = bus.ppu
    val &= 0xFF
    if addr < 0x3F00:
        ppu.addr_bus = addr
    if 0x0000 <= addr <= 0x1FFF:
        bus.cart.write_chr(addr, val)
    elif 0x2000 <= addr <= 0x3EFF:
        ppu.vram[vram_addr_to_nametables(addr, bus.cart.mirroring())] = val
    elif 0x3F00 <= addr <= 0x3F1F:
        ppu.palette_mem[palette_mem_addr(addr)] = val


def increment_v_after_ppudata_access(bus: PpuBus) -> None:
    """Advance v by 1 or 32, as PPUCTRL selects, after a PPUDATA access."""
    ppu = bus.ppu
    ppu.v = (ppu.v + (32 if ppu.increment_select else 1)) & 0xFFFF
    ppu.addr_bus = ppu.v