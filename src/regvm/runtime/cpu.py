import logging as lg
from typing import Callable, TextIO

import regvm.common.ops as ops
import regvm.common.immediate as imm
from regvm.common.hwconf import MAGNITUDE_SIZE, REGISTER_COUNT
from regvm.common.vmconf import VMOptions
from regvm.runtime.registers import Registers


class VMError(Exception):
    ''' Fatal execution error, reported with a program offset '''

    def __init__(self, offset: int, message: str):
        super().__init__(message)
        self.offset = offset


class TruncatedOperand(VMError):
    def __init__(self, offset: int):
        super().__init__(offset, f'Invalid next bytecode at offset {offset}')


class InvalidSignByte(VMError):
    def __init__(self, offset: int, value: int):
        super().__init__(offset, f'Invalid number sign 0x{value:02X} at offset {offset}')
        self.value = value


class DivisionByZero(VMError, ZeroDivisionError):
    def __init__(self, offset: int):
        super().__init__(offset, f'Division by zero at offset {offset}')


class UnassignedOpcode(VMError):
    def __init__(self, offset: int, value: int):
        super().__init__(offset, f'Unassigned opcode 0x{value:02X} at offset {offset}')
        self.value = value


class EndOfProgram(Exception):
    pass


def div_toward_zero(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


Handler = Callable[['CPU', ops.Instruction, int | None], None]


class CPU():
    ip: int         # Instruction pointer
    op_ip: int      # Offset of the opcode being executed
    program: bytes  # Never mutated
    regs: Registers
    executed: int   # Steps taken, skipped bytes included

    def __init__(
        self,
        program: bytes,
        regs: Registers,
        options: VMOptions | None = None,
        out: TextIO | None = None
    ):
        self.program = bytes(program)
        self.length = len(self.program)
        self.regs = regs
        self.options = options if options is not None else VMOptions()
        self.table = ops.get_table(self.options.extended)
        self.out = out  # None means the current sys.stdout

        self.ip = 0
        self.op_ip = 0
        self.executed = 0

    # - Helpers - #

    @property
    def done(self) -> bool:
        return self.ip >= self.length

    def debug_dump(self):
        state = [f'IP:{self.ip:X}']
        state.extend([f'R{i}:{self.regs.get(i)}' for i in range(REGISTER_COUNT)])
        lg.debug(' '.join(state))

    def current(self) -> int:
        return self.program[self.ip]

    def advance(self):
        self.ip += 1

        if self.done:
            raise TruncatedOperand(self.ip - 1)

    def next_immediate(self) -> int:
        self.advance()
        sign = self.current()

        if not imm.is_sign(sign):
            raise InvalidSignByte(self.ip, sign)

        start = self.ip + 1

        for _ in range(MAGNITUDE_SIZE):
            self.advance()

        magnitude = imm.unpack_magnitude(self.program[start:self.ip + 1])
        return imm.apply_sign(sign, magnitude)

    def emit(self, value: int):
        print(value, file=self.out)

    def arithm_imm(self, instr: ops.Instruction, value: int, op: Callable[[int, int], int]):
        dst = instr.dst
        self.regs.set(dst, op(self.regs.get(dst), value))

    # - Operations - #

    def ldi(self, instr: ops.Instruction, value: int):
        self.regs.set(instr.dst, value)

    def addi(self, instr: ops.Instruction, value: int):
        self.arithm_imm(instr, value, lambda a, b: a + b)

    def subi(self, instr: ops.Instruction, value: int):
        self.arithm_imm(instr, value, lambda a, b: a - b)

    def muli(self, instr: ops.Instruction, value: int):
        self.arithm_imm(instr, value, lambda a, b: a * b)

    def divi(self, instr: ops.Instruction, value: int):
        if value == 0:
            raise DivisionByZero(self.op_ip)

        self.arithm_imm(instr, value, div_toward_zero)

    def mov(self, instr: ops.Instruction, _):
        self.regs.set(instr.dst, self.regs.get(instr.src))

    def add(self, instr: ops.Instruction, _):
        a = self.regs.get(instr.dst)
        b = self.regs.get(instr.src)
        self.regs.set(instr.dst, a + b)

    def prn(self, instr: ops.Instruction, _):
        self.emit(self.regs.get(instr.dst))

    def pri(self, _, value: int):
        self.emit(value)

    HANDLERS: dict[ops.Operation, Handler] = {
        ops.Operation.LDI: ldi,
        ops.Operation.ADDI: addi,
        ops.Operation.SUBI: subi,
        ops.Operation.MULI: muli,
        ops.Operation.DIVI: divi,
        ops.Operation.MOV: mov,
        ops.Operation.ADD: add,
        ops.Operation.PRN: prn,
        ops.Operation.PRI: pri
    }

    # -- Implementation -- #

    def step(self) -> ops.Instruction | None:
        if self.done:
            raise EndOfProgram(f'Program finished at offset {self.ip}')

        self.op_ip = self.ip
        opcode = self.current()
        instr = self.table.get(opcode)

        if instr is None:
            if self.options.strict:
                raise UnassignedOpcode(self.op_ip, opcode)

            lg.debug(f'Skipping unassigned opcode 0x{opcode:02X} at offset {self.op_ip}')
        else:
            value = self.next_immediate() if instr.operation.has_immediate else None
            handler = self.HANDLERS[instr.operation]
            handler(self, instr, value)

        self.ip += 1
        self.executed += 1

        if self.options.trace:
            self.debug_dump()

        return instr

    def run(self):
        while not self.done:
            self.step()
