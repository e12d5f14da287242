"""A small assembler from CHIP-8 mnemonics to byte code."""

from __future__ import annotations

import enum
import logging
import re
from os import PathLike
from pathlib import Path

logger = logging.getLogger(__name__)

PROGRAM_START = 0x0200

_HEX = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")


class AssemblerError(ValueError):
    """Raised when an instruction cannot be turned into byte code."""


class _State(enum.Enum):
    NEW_LINE = enum.auto()
    MNEMONIC = enum.auto()
    NEW_PARAM = enum.auto()
    PARAM = enum.auto()
    IGNORE = enum.auto()


def _hex(text: str) -> int:
    """Parse the leading hexadecimal number of text."""
    match = _HEX.match(text)
    if match is None:
        raise AssemblerError(f"not a hexadecimal number: {text!r}")
    value = int(match.group(2), 16)
    return -value if match.group(1) == "-" else value


def _is_register(operand: str) -> bool:
    return operand.startswith("$")


def _register(operand: str) -> int:
    return _hex(operand[1:2])


class Assembler:
    """Collects instructions and labels from source text and emits byte code."""

    def __init__(self) -> None:
        self.instructions: list[list[str]] = []
        self.labels: dict[str, int] = {}

    def parse(self, text: str) -> None:
        """Split source text into instructions and record label addresses."""
        state = _State.NEW_LINE
        pc = PROGRAM_START
        mnemonic = ""
        param = ""
        instruction: list[str] = []

        def end_instruction() -> None:
            nonlocal instruction, pc
            self.instructions.append(instruction)
            instruction = []
            pc = (pc + 2) & 0xFFFF

        for ch in text:
            if state is _State.IGNORE:
                if ch == "\n":
                    state = _State.NEW_LINE
            elif state is _State.NEW_LINE:
                if ch == ";":
                    state = _State.IGNORE
                elif ch not in " \t\n":
                    mnemonic += ch
                    state = _State.MNEMONIC
            elif state is _State.MNEMONIC:
                if ch in " \t;\n":
                    instruction.append(mnemonic)
                    mnemonic = ""
                    if ch in ";\n":
                        end_instruction()
                        state = _State.NEW_LINE if ch == "\n" else _State.IGNORE
                    else:
                        state = _State.NEW_PARAM
                elif ch == ":":
                    self.labels[mnemonic] = pc
                    mnemonic = ""
                else:
                    mnemonic += ch
            elif state is _State.NEW_PARAM:
                if ch in ";\n":
                    end_instruction()
                    state = _State.NEW_LINE if ch == "\n" else _State.IGNORE
                elif ch not in " \t":
                    param += ch
                    state = _State.PARAM
            elif state is _State.PARAM:
                if ch in ";\n":
                    instruction.append(param)
                    param = ""
                    end_instruction()
                    state = _State.NEW_LINE if ch == "\n" else _State.IGNORE
                elif ch == ",":
                    instruction.append(param)
                    param = ""
                elif ch not in " \t":
                    param += ch

    def compile(self, path: str | PathLike[str]) -> None:
        """Parse the assembly source in the file at path."""
        self.parse(Path(path).read_text())

    def _address(self, operand: str) -> tuple[int, int]:
        """Return the high nibble and low byte of a label or literal address."""
        addr = self.labels.get(operand, 0)
        if addr:
            return addr >> 8, addr & 0xFF
        return _hex(operand[0:1]), _hex(operand[1:3])

    def generate(self) -> bytes:
        """Emit byte code for every parsed instruction."""
        logger.debug("Generating byte code for %d instructions", len(self.instructions))
        code = bytearray()

        def emit(*values: int) -> None:
            code.extend(value & 0xFF for value in values)

        for mnemonic, *params in self.instructions:

            def arg(index: int) -> str:
                try:
                    return params[index]
                except IndexError:
                    raise AssemblerError(
                        f"{mnemonic}: missing operand {index + 1}"
                    ) from None

            if mnemonic == "CLS":
                emit(0x00, 0x0E)
            elif mnemonic == "LD":
                if arg(1) == "DT":
                    emit(0xF0 + _register(arg(0)), 0x07)
                elif arg(0) == "DT":
                    emit(0xF0 + _register(arg(1)), 0x15)
                elif arg(0) == "ST":
                    emit(0xF0 + _register(arg(1)), 0x18)
                elif arg(1) == "K":
                    emit(0xF0 + _register(arg(0)), 0x0A)
                elif arg(0) == "I":
                    if _is_register(arg(1)):
                        emit(0xF0 + _register(arg(1)), 0x29)
                    else:
                        hi, lo = self._address(arg(1))
                        emit(0xA0 + hi, lo)
                elif _is_register(arg(0)) and _is_register(arg(1)):
                    emit(0x80 + _register(arg(0)), _register(arg(0)) * 0x10)
                else:
                    emit(0x60 + _register(arg(0)), _hex(arg(1)))
            elif mnemonic == "DRW":
                emit(
                    0xD0 + _register(arg(0)),
                    _register(arg(1)) * 0x10 + _hex(arg(2)),
                )
            elif mnemonic == "JP":
                hi, lo = self._address(arg(0))
                emit(0x10 + hi, lo)
            elif mnemonic == "ADD":
                if arg(0) == "I":
                    emit(0xF0 + _register(arg(1)), 0x1E)
                else:
                    emit(0x70 + _register(arg(0)), _hex(arg(1)))
            elif mnemonic == "RTS":
                emit(0x00, 0xEE)
            elif mnemonic == "CALL":
                hi, lo = self._address(arg(0))
                emit(0x20 + hi, lo)
            elif mnemonic in ("SE", "SNE"):
                reg_base, value_base = (0x50, 0x30) if mnemonic == "SE" else (0x90, 0x40)
                if _is_register(arg(1)):
                    emit(reg_base + _register(arg(0)), _register(arg(1)) * 0x10)
                else:
                    emit(value_base + _register(arg(0)), _hex(arg(1)[1:3]))
            elif mnemonic in ("OR", "AND", "XOR"):
                if _is_register(arg(0)) and _is_register(arg(1)):
                    identifier = {"OR": 0x01, "AND": 0x02, "XOR": 0x03}[mnemonic]
                    emit(
                        0x80 + _register(arg(0)),
                        _register(arg(1)) * 0x10 + identifier,
                    )
        return bytes(code)


def assemble(text: str) -> bytes:
    """Assemble source text into byte code."""
    assembler = Assembler()
    assembler.parse(text)
    return assembler.generate()