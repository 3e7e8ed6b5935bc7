# famippu

The picture side of an NES emulator core, written in pure Python with no dependencies.

## Modules

- `famippu.rom`: parses iNES ROM images into a frozen `RomConfig`. It has these fields:
  - `mapper_id`
  - `mirroring` (a `Mirroring` member)
  - `prg_rom`
  - `chr_rom` (`None` when the cartridge uses CHR RAM)
  - `has_prg_ram`

  It also has a `chr_is_ram` property. A malformed image raises `RomError`, which is a `ValueError`.
- `famippu.ppu`: the `Ppu` dataclass. It holds every register, memory and internal latch. It provides `set_ppuctrl_from_byte`, `set_ppumask_from_byte` and `ppustatus_byte`.
- `famippu.vram`: the PPU address space.
  - `Cartridge` holds the pattern-table memory and the nametable mirroring. Build one with `Cartridge.from_rom(rom)` or `Cartridge.from_chr(chr_rom, mirroring)`. Without CHR ROM it gets 8 KiB of writable CHR RAM.
  - `PpuBus` ties a `Ppu` to a `Cartridge` and an optional frame buffer.
  - `read_vram`, `write_vram` and `increment_v_after_ppudata_access` work on a `PpuBus`.
  - `vram_addr_to_nametables` and `palette_mem_addr` map addresses to offsets.
- `famippu.render`: `step_ppu(bus)` advances the PPU by one dot. On each dot it does the following:
  - fetches background and sprite data;
  - evaluates sprites;
  - detects sprite-zero hits;
  - sets vblank and the NMI line;
  - skips the last pre-render dot on odd frames;
  - writes RGBA pixels into the frame buffer.

  It also exports `inc_v_horizontal`, `inc_v_vertical`, the `PALETTE` table and the bit masks of the `v`/`t` registers.
- `famippu.registers`: CPU-side access to the PPU registers at `0x2000`–`0x2007`, mirrored up to `0x3FFF`.
  - `read_register(bus, addr, safe_read=False)`
  - `write_register(bus, addr, val, cpu_cycles=PPU_WARMUP)`

  Both raise `ValueError` for an address outside that range.
- `famippu.util`: small bit helpers: `get_bit`, `get_bit_u16`, `concat_u8`, `is_neg`, `flip_byte` and `to_mask`.

## Install

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Loading a ROM

```python
from famippu.rom import load_rom, RomError

try:
    rom = load_rom("game.nes")
except RomError as err:
    print(err)
else:
    print(rom.mapper_id, rom.mirroring, rom.chr_is_ram)
```

`parse_ines(data, name)` parses bytes that are already in memory. `name` is used only in error messages.

## Running the PPU

```python
from famippu.render import step_ppu
from famippu.registers import write_register
from famippu.vram import Cartridge, PpuBus

bus = PpuBus(cart=Cartridge.from_rom(rom), frame=bytearray(256 * 240 * 4))
write_register(bus, 0x2001, 0b0001_1110)   # PPUMASK: show background and sprites
for _ in range(341 * 262):
    step_ppu(bus)
```

Call `step_ppu` once per PPU dot, which is three dots for every CPU cycle. When the bus has a frame buffer, visible pixels are written into it as RGBA.

`write_register` takes the CPU cycle count at the time of the write. While that count is below `PPU_WARMUP`, writes to PPUCTRL, PPUMASK, PPUSCROLL and PPUADDR only reach the open-bus latch. A read with `safe_read=True` returns the same value as a normal read but has none of its side effects:

- the vblank flag is not cleared;
- the PPUDATA buffer is not refilled;
- `v` is not incremented.

## What it does not do

This package is only the PPU and ROM loading. It does not include:

- a CPU or an APU;
- controller input or OAM DMA;
- the rest of the CPU memory map;
- cartridge mappers beyond plain CHR ROM/RAM;
- a window, audio output or a command-line program.

A host program has to drive `step_ppu`, route the CPU's register accesses to `read_register`/`write_register`, and display the frame buffer.