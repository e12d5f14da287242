"""A CHIP-8 virtual machine: memory, registers, timers, keypad and display."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

logger = logging.getLogger(__name__)

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
DISPLAY_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT

MEMORY_SIZE = 4096
REGISTER_COUNT = 16
STACK_SIZE = 16
KEY_COUNT = 16

PROG_START_ADDR = 0x200
FONT_START_ADDR = 0x050

# 16 built-in characters, 5 bytes each
FONTSET = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)
FONTSET_SIZE = len(FONTSET)


class UnknownOpcodeError(ValueError):
    """Raised when the CPU meets an opcode family it cannot execute."""


class Cpu:
    """The CHIP-8 machine state and its fetch/decode cycle."""

    def __init__(self) -> None:
        self.initialize()

    def initialize(self) -> None:
        """Reset every register, the memory and the display; load the font."""
        self.v = bytearray(REGISTER_COUNT)
        self.memory = bytearray(MEMORY_SIZE)
        self.stack = [0] * STACK_SIZE
        self.display = bytearray(DISPLAY_SIZE)
        self.keypad = [False] * KEY_COUNT
        self.i = 0
        self.sp = 0
        self.opcode = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.memory[FONT_START_ADDR:FONT_START_ADDR + FONTSET_SIZE] = FONTSET
        self.pc = PROG_START_ADDR

    def read_rom(self, path: str | PathLike[str]) -> None:
        """Load a binary ROM file at the program start address."""
        self.load_program(Path(path).read_bytes())

    def load_program(self, program: Iterable[int]) -> None:
        """Copy program bytes into memory at the program start address."""
        data = bytes(program)
        if len(data) > MEMORY_SIZE - PROG_START_ADDR:
            raise ValueError(
                f"program of {len(data)} bytes does not fit in memory"
            )
        self.memory[PROG_START_ADDR:PROG_START_ADDR + len(data)] = data

    def fetch(self) -> None:
        """Read the two-byte opcode at the program counter and advance it."""
        hi = self.memory[self.pc % MEMORY_SIZE]
        lo = self.memory[(self.pc + 1) % MEMORY_SIZE]
        self.pc = (self.pc + 2) & 0xFFFF
        self.opcode = (hi << 8) | lo

    def step(self) -> None:
        """Run one fetch/decode cycle."""
        self.fetch()
        self.decode()

    @property
    def _x(self) -> int:
        return (self.opcode & 0x0F00) >> 8

    @property
    def _y(self) -> int:
        return (self.opcode & 0x00F0) >> 4

    @property
    def _n(self) -> int:
        return self.opcode & 0x000F

    @property
    def _nn(self) -> int:
        return self.opcode & 0x00FF

    @property
    def _nnn(self) -> int:
        return self.opcode & 0x0FFF

    def decode(self) -> None:
        """Execute the current opcode."""
        match self.opcode & 0xF000:
            case 0x0000:
                self._decode_system()
            case 0x1000:  # 1NNN - JP NNN
                self.pc = self._nnn
            case 0x2000:  # 2NNN - CALL NNN
                if self.sp == STACK_SIZE:
                    logger.warning("Stack out of space!")
                    return
                self.stack[self.sp] = self.pc
                self.sp += 1
                self.pc = self._nnn
            case 0x6000:  # 6XNN - LD Vx, NN
                self.v[self._x] = self._nn
            case 0x7000:  # 7XNN - ADD Vx, NN
                self.v[self._x] = (self.v[self._x] + self._nn) & 0xFF
            case 0x8000:
                self._decode_logic()
            case 0xA000:  # ANNN - LD I, NNN
                self.i = self._nnn
            case 0xD000:  # DXYN - DRW Vx, Vy, N
                self._draw()
            case 0xF000:
                self._decode_misc()
            case _:
                raise UnknownOpcodeError(
                    f"No such opcode 0x{self.opcode:04X} "
                    f"at address 0x{(self.pc - 2) & 0xFFFF:04X}"
                )

    def _decode_system(self) -> None:
        match self.opcode & 0x000F:
            case 0x0000:  # 00E0 - CLS
                self.display[:] = bytes(DISPLAY_SIZE)
            case 0x000E:  # 00EE - RTS
                pass
            case _:
                logger.warning("Unknown opcode [0x0000]: 0x%X", self.opcode)

    def _decode_logic(self) -> None:
        x, y = self._x, self._y
        match self.opcode & 0x000E:
            case 0x0000:  # 8XY0 - LD Vx, Vy
                self.v[x] = self.v[y]
            case 0x0001:  # OR
                self.v[x] |= self.v[y]
            case 0x0002:  # AND
                self.v[x] &= self.v[y]
            case 0x0003:  # XOR
                self.v[x] ^= self.v[y]

    def _draw(self) -> None:
        height = self._n
        x_pos = self.v[self._x] % SCREEN_WIDTH
        y_pos = self.v[self._y] % SCREEN_HEIGHT
        self.v[0xF] = 0
        for row in range(height):
            sprite_byte = self.memory[(self.i + row) % MEMORY_SIZE]
            for col in range(8):
                if not sprite_byte & (0x80 >> col):
                    continue
                pos = SCREEN_WIDTH * (y_pos + row) + x_pos + col
                if pos >= DISPLAY_SIZE:
                    continue
                if self.display[pos]:
                    self.v[0xF] = 1
                self.display[pos] ^= 1

    def _decode_misc(self) -> None:
        x = self._x
        match self.opcode & 0x00FF:
            case 0x07:  # FX07 - LD Vx, DT
                self.v[x] = self.delay_timer
            case 0x15:  # FX15 - LD DT, Vx
                self.delay_timer = self.v[x]
            case 0x18:  # FX18 - LD ST, Vx
                self.sound_timer = self.v[x]
            case 0x0A:  # FX0A - LD Vx, K
                pressed = next(
                    (key for key, down in enumerate(self.keypad) if down), None
                )
                if pressed is None:
                    self.pc = (self.pc - 2) & 0xFFFF
                else:
                    self.v[x] = pressed
            case 0x1E:  # FX1E - ADD I, Vx
                self.i = (self.i + self.v[x]) & 0xFFFF
            case 0x29:  # FX29 - LD F, Vx
                self.i = (FONT_START_ADDR + 5 * self.v[x]) & 0xFFFF

    @staticmethod
    def _check_key(key: int) -> int:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"key must be between 0x0 and 0xF, got {key!r}")
        return key

    def set_key(self, key: int) -> None:
        """Mark a keypad key as pressed."""
        self.keypad[self._check_key(key)] = True

    def unset_key(self, key: int) -> None:
        """Mark a keypad key as released."""
        self.keypad[self._check_key(key)] = False

    def decrement_timers(self) -> None:
        """Count the delay and sound timers down by one, stopping at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1