import logging as lg
from typing import List, Tuple

import regvm.common.ops as ops
import regvm.common.immediate as imm
from regvm.common.ops import Operation


class AsmError(Exception):
    def __init__(self, line: int, message: str, namespace: str = '<global>'):
        super().__init__(f'{namespace}:{line}: {message}')
        self.line = line
        self.namespace = namespace


class FPP:
    ''' First pass processor '''
    cmd_list: List[Tuple[int, bytes]]  # (line, bytes)

    def __init__(self, extended: bool = False):
        self.cmd_list = list()
        self.offset = 0
        self.namespace = '<global>'
        self.table = ops.get_table(extended)

    def fail(self, line: int, message: str):
        raise AsmError(line, message, self.namespace)

    def issue_bytes(self, line: int, bytestr: bytes):
        self.cmd_list.append((line, bytestr))
        self.offset += len(bytestr)

    def lookup(self, line: int, operation: Operation, dst: int | None = None, src: int | None = None) -> int:
        opcode = ops.find_opcode(self.table, operation, dst=dst, src=src)

        if opcode is None:
            regs = ' -> '.join(f'r{r}' for r in (src, dst) if r is not None)
            self.fail(line, f'No opcode for {operation.value} {regs}')

        return opcode

    def encode_immediate(self, line: int, value: int) -> bytes:
        try:
            return imm.encode(value)
        except ValueError as e:
            self.fail(line, str(e))

    # Handlers
    def issue(self, arg: Tuple[Operation, int, list]):
        operation, line, operands = arg

        if operation == Operation.PRI:
            opcode = self.lookup(line, operation)
            operand = self.encode_immediate(line, operands[0])
        elif operation == Operation.PRN:
            opcode = self.lookup(line, operation, dst=operands[0])
            operand = bytes()
        elif operation.has_immediate:
            value, dst = operands
            opcode = self.lookup(line, operation, dst=dst)
            operand = self.encode_immediate(line, value)
        else:
            src, dst = operands
            opcode = self.lookup(line, operation, dst=dst, src=src)
            operand = bytes()

        lg.debug(f'Issuing command 0x{opcode:02X} @ 0x{self.offset:X}')
        self.issue_bytes(line, bytes([opcode]) + operand)

    def issue_byte(self, arg: Tuple[int, int]):
        line, value = arg

        if value > 0xFF:
            self.fail(line, f'Byte value {value} is out of range')

        self.issue_bytes(line, bytes([value]))

    def on_fail(self, arg: Tuple[int, str]):
        line, rest = arg
        self.fail(line, f'Unknown command {rest}')
