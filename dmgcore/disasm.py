"""Disassembler for the handheld's LR35902 instruction set."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

__all__ = ["Instruction", "disassemble_one", "disassemble"]

_INVALID = "***INVALID***"

_REGS = ("B", "C", "D", "E", "H", "L", "(HL)", "A")

_LOW_OPCODES = (
    "NOP", "LD BC,%w", "LD (BC),A", "INC BC", "INC B", "DEC B", "LD B,%b", "RLCA",
    "LD (%w),SP", "ADD HL,BC", "LD A,(BC)", "DEC BC", "INC C", "DEC C", "LD C,%b", "RRCA",
    "STOP", "LD DE,%w", "LD (DE),A", "INC DE", "INC D", "DEC D", "LD D,%b", "RLA",
    "JR %o", "ADD HL,DE", "LD A,(DE)", "DEC DE", "INC E", "DEC E", "LD E,%b", "RRA",
    "JR NZ,%o", "LD HL,%w", "LD (HLI),A", "INC HL", "INC H", "DEC H", "LD H,%b", "DAA",
    "JR Z,%o", "ADD HL,HL", "LD A,(HLI)", "DEC HL", "INC L", "DEC L", "LD L,%b", "CPL",
    "JR NC,%o", "LD SP,%w", "LD (HLD),A", "INC SP", "INC (HL)", "DEC (HL)", "LD (HL),%b", "SCF",
    "JR C,%o", "ADD HL,SP", "LD A,(HLD)", "DEC SP", "INC A", "DEC A", "LD A,%b", "CCF",
)

_HIGH_OPCODES = (
    "RET NZ", "POP BC", "JP NZ,%w", "JP %w", "CALL NZ,%w", "PUSH BC", "ADD A,%b", "RST 0h",
    "RET Z", "RET", "JP Z,%w", None, "CALL Z,%w", "CALL %w", "ADC A,%b", "RST 8h",
    "RET NC", "POP DE", "JP NC,%w", None, "CALL NC,%w", "PUSH DE", "SUB %b", "RST 10h",
    "RET C", "RETI", "JP C,%w", None, "CALL C,%w", None, "SBC A,%b", "RST 18h",
    "LD (FF00+%b),A", "POP HL", "LD (FF00+C),A", None, None, "PUSH HL", "AND %b", "RST 20h",
    "ADD SP,%o", "JP HL", "LD (%w),A", None, None, None, "XOR %b", "RST 28h",
    "LD A,(FF00+%b)", "POP AF", "LD A,(FF00+C)", "DI", None, "PUSH AF", "OR %b", "RST 30h",
    "LD HL,SP%o", "LD SP,HL", "LD A,(%w)", "EI", None, None, "CP %b", "RST 38h",
)

_ALU_PREFIXES = ("ADD A,", "ADC A,", "SUB ", "SBC A,", "AND ", "XOR ", "OR ", "CP ")


def _load_mnemonic(opcode: int) -> str:
    if opcode == 0x76:
        return "HALT"
    return f"LD {_REGS[(opcode >> 3) & 7]},{_REGS[opcode & 7]}"


def _alu_mnemonic(opcode: int) -> str:
    if opcode == 0x8F:
        return "ADC A"
    return _ALU_PREFIXES[(opcode >> 3) & 7] + _REGS[opcode & 7]


_MNEMONICS: tuple[str | None, ...] = (
    _LOW_OPCODES
    + tuple(_load_mnemonic(op) for op in range(0x40, 0x80))
    + tuple(_alu_mnemonic(op) for op in range(0x80, 0xC0))
    + _HIGH_OPCODES
)

_SHIFT_OPS = ("RLC", "RRC", "RL", "RR", "SLA", "SRA", "SWAP", "SRL")
_BIT_OPS = ("BIT", "RES", "SET")


def _cb_mnemonic(opcode: int) -> str:
    reg = _REGS[opcode & 7]
    if opcode < 0x40:
        return f"{_SHIFT_OPS[opcode >> 3]} {reg}"
    return f"{_BIT_OPS[(opcode >> 6) - 1]} {(opcode >> 3) & 7},{reg}"


_CB_MNEMONICS = tuple(_cb_mnemonic(op) for op in range(256))

_OPERAND_COUNT = (
    1, 3, 1, 1, 1, 1, 2, 1, 3, 1, 1, 1, 1, 1, 2, 1,
    1, 3, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1, 1, 1, 2, 1,
    2, 3, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1, 1, 1, 2, 1,
    2, 3, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1, 1, 1, 2, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1,
    1, 1, 3, 3, 3, 1, 2, 1, 1, 1, 3, 2, 3, 3, 2, 1,
    1, 1, 3, 1, 3, 1, 2, 1, 1, 1, 3, 1, 3, 1, 2, 1,
    2, 1, 1, 1, 1, 1, 2, 1, 2, 1, 3, 1, 1, 1, 2, 1,
    2, 1, 1, 1, 1, 1, 2, 1, 2, 1, 3, 1, 1, 1, 2, 1,
)


@dataclass(frozen=True)
class Instruction:
    """One decoded instruction: where it starts, its bytes and its text."""

    address: int
    data: bytes
    mnemonic: str

    def render(self) -> str:
        """Format as an address, a byte column and the padded mnemonic."""
        count = _OPERAND_COUNT[self.data[0]]
        shown = " ".join(f"{value:02X}" for value in self.data[:count])
        return f"{self.address:04X} {shown:<9}{self.mnemonic:<16.16}"


def disassemble_one(read: Callable[[int], int], address: int) -> Instruction:
    """Decode the instruction at ``address``; ``read`` returns the byte at an address."""
    start = address & 0xFFFF
    position = start
    data = bytearray()

    def fetch() -> int:
        nonlocal position
        value = read(position) & 0xFF
        data.append(value)
        position = (position + 1) & 0xFFFF
        return value

    code = fetch()
    if code == 0xCB:
        pattern = _CB_MNEMONICS[fetch()]
    else:
        pattern = _MNEMONICS[code] or _INVALID

    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char != "%":
            parts.append(char)
            continue
        kind = next(chars, "").lower()
        if kind == "b":
            parts.append(f"{fetch():02X}h")
        elif kind == "w":
            low = fetch()
            high = fetch()
            parts.append(f"{(high << 8) | low:04X}h")
        elif kind == "o":
            value = fetch()
            parts.append(f"{value - 256 if value >= 0x80 else value:+d}")
    return Instruction(start, bytes(data), "".join(parts))


def disassemble(
    read: Callable[[int], int], address: int, count: int
) -> Iterator[Instruction]:
    """Yield ``count`` consecutive instructions starting at ``address``."""
    for _ in range(count):
        instruction = disassemble_one(read, address)
        yield instruction
        address = (instruction.address + len(instruction.data)) & 0xFFFF