"""Loading of iNES cartridge images."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

logger = logging.getLogger(__name__)

INES_HEADER_SIZE = 16
INES_MAGIC = b"NES\x1a"
_KB = 1024
PRG_BANK_SIZE = 16 * _KB
CHR_BANK_SIZE = 8 * _KB


class Mirroring(enum.Enum):
    """How the two physical nametables are mapped into PPU address space."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    SINGLE_SCREEN_LOWER = "single_screen_lower"
    SINGLE_SCREEN_UPPER = "single_screen_upper"


class RomError(ValueError):
    """Raised when a file is not a usable iNES image."""


@dataclass(frozen=True)
class RomConfig:
    """The contents of an iNES image split into its parts."""

    mapper_id: int
    mirroring: Mirroring
    prg_rom: bytes
    chr_rom: bytes | None
    has_prg_ram: bool

    @property
    def chr_is_ram(self) -> bool:
        return self.chr_rom is None


def parse_ines(data: bytes, name: str = "<memory>") -> RomConfig:
    """Parse the bytes of an iNES image; ``name`` is used in error messages."""
    if len(data) < INES_HEADER_SIZE or not data.startswith(INES_MAGIC):
        raise RomError(f"{name} is not a valid iNES rom file (header doesn't fit)")

    prg_rom_end = INES_HEADER_SIZE + PRG_BANK_SIZE * data[4]
    chr_rom_end = prg_rom_end + CHR_BANK_SIZE * data[5]

    if len(data) < chr_rom_end:
        raise RomError(f"{name} is not a valid iNES rom file (file not long enough)")

    chr_is_ram = prg_rom_end == chr_rom_end
    has_prg_ram = bool(data[6] & 0b10)
    mapper_id = (data[7] & 0xF0) | (data[6] >> 4)

    logger.info("Mapper: %d, PRG RAM: %s, CHR RAM: %s", mapper_id, has_prg_ram, chr_is_ram)

    return RomConfig(
        mapper_id=mapper_id,
        mirroring=Mirroring.VERTICAL if data[6] & 1 else Mirroring.HORIZONTAL,
        prg_rom=bytes(data[INES_HEADER_SIZE:prg_rom_end]),
        chr_rom=None if chr_is_ram else bytes(data[prg_rom_end:chr_rom_end]),
        has_prg_ram=has_prg_ram,
    )


def load_rom(path: str | PathLike[str]) -> RomConfig:
    """Read and parse an iNES file from disk."""
    path = Path(path)
    return parse_ines(path.read_bytes(), str(path))