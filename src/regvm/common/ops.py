''' Opcode table '''

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from regvm.common.hwconf import IMMEDIATE_SIZE


class Operation(Enum):
    LDI = 'LoadImmediate'
    ADDI = 'AddImmediate'
    SUBI = 'SubImmediate'
    MULI = 'MulImmediate'
    DIVI = 'DivImmediate'
    MOV = 'MoveRegister'
    ADD = 'AddRegister'
    PRN = 'PrintRegister'
    PRI = 'PrintImmediate'

    @property
    def has_immediate(self) -> bool:
        return self in IMMEDIATE_OPERATIONS


IMMEDIATE_OPERATIONS = frozenset([
    Operation.LDI,
    Operation.ADDI,
    Operation.SUBI,
    Operation.MULI,
    Operation.DIVI,
    Operation.PRI
])

REGISTERS = ('r0', 'r1', 'r2', 'r3')

# Immediate ops: base + dst
LDI = 0x01  # imm -> R
ADDI = 0x05  # R + imm -> R
SUBI = 0x09  # R - imm -> R
MULI = 0x0D  # R * imm -> R
DIVI = 0x11  # R / imm -> R (toward zero)

# Register ops: base + 4 * dst + src
MOV = 0x15  # S -> D
ADD = 0x25  # D + S -> D, D in R0..R2

# Print
PRN = 0x31  # print R
PRI = 0x35  # print imm

# Extended: base + src
ADD_R3 = 0x36  # R3 + S -> R3


@dataclass(frozen=True)
class Instruction:
    opcode: int
    operation: Operation
    dst: int | None = None
    src: int | None = None

    @property
    def mnemonic(self) -> str:
        name = self.operation.name.lower()
        regs = [REGISTERS[r] for r in (self.src, self.dst) if r is not None]
        return ' '.join([name, *regs])

    @property
    def size(self) -> int:
        ''' Total bytes consumed including the opcode '''
        return 1 + IMMEDIATE_SIZE if self.operation.has_immediate else 1


OpcodeTable = Dict[int, Instruction]


def _add(table: OpcodeTable, instr: Instruction):
    if instr.opcode in table:
        raise ValueError(f'Opcode 0x{instr.opcode:02X} is already assigned')

    table[instr.opcode] = instr


def build_default_table() -> OpcodeTable:
    table: OpcodeTable = dict()

    for base, op in [
        (LDI, Operation.LDI),
        (ADDI, Operation.ADDI),
        (SUBI, Operation.SUBI),
        (MULI, Operation.MULI),
        (DIVI, Operation.DIVI),
        (PRN, Operation.PRN)
    ]:
        for reg in range(4):
            _add(table, Instruction(base + reg, op, dst=reg))

    for dst in range(4):
        for src in range(4):
            _add(table, Instruction(MOV + 4 * dst + src, Operation.MOV, dst=dst, src=src))

    # No register-to-register add into R3 in the default set
    for dst in range(3):
        for src in range(4):
            _add(table, Instruction(ADD + 4 * dst + src, Operation.ADD, dst=dst, src=src))

    _add(table, Instruction(PRI, Operation.PRI))

    return table


def build_extended_table() -> OpcodeTable:
    table = build_default_table()

    for src in range(4):
        _add(table, Instruction(ADD_R3 + src, Operation.ADD, dst=3, src=src))

    return table


DEFAULT_TABLE = build_default_table()
EXTENDED_TABLE = build_extended_table()


def get_table(extended: bool = False) -> OpcodeTable:
    return EXTENDED_TABLE if extended else DEFAULT_TABLE


def find_opcode(table: OpcodeTable, operation: Operation, dst: int | None = None, src: int | None = None) -> int | None:
    for opcode, instr in table.items():
        if instr.operation == operation and instr.dst == dst and instr.src == src:
            return opcode

    return None
