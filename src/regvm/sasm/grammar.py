# type: ignore
''' Assembler grammar '''

import pyparsing as pp

from regvm.common.ops import Operation, REGISTERS
from regvm.sasm.fpp import FPP


comment = pp.Suppress(pp.Regex('//.*'))

reg_indices = {name: index for index, name in enumerate(REGISTERS)}

reg_ref = pp.MatchFirst([pp.CaselessKeyword(x) for x in REGISTERS])
reg_op = reg_ref.set_parse_action(lambda r: reg_indices[r[0].lower()])

us_dec_const = pp.Regex('[0-9]+').set_parse_action(lambda r: int(r[0]))
s_dec_const = pp.Regex('[+-]?[0-9]+').set_parse_action(lambda r: int(r[0]))


def g_cmd(literal, operation, *operands):
    expr = pp.Suppress(pp.CaselessKeyword(literal))

    for operand in operands:
        expr = expr + operand

    return expr.set_parse_action(lambda s, loc, r: (FPP.issue, (operation, pp.lineno(loc, s), list(r))))


# Immediate to register: <imm> <dst>
ldi_cmd = g_cmd('ldi', Operation.LDI, s_dec_const, reg_op)
addi_cmd = g_cmd('addi', Operation.ADDI, s_dec_const, reg_op)
subi_cmd = g_cmd('subi', Operation.SUBI, s_dec_const, reg_op)
muli_cmd = g_cmd('muli', Operation.MULI, s_dec_const, reg_op)
divi_cmd = g_cmd('divi', Operation.DIVI, s_dec_const, reg_op)

# Register to register: <src> <dst>
mov_cmd = g_cmd('mov', Operation.MOV, reg_op, reg_op)
add_cmd = g_cmd('add', Operation.ADD, reg_op, reg_op)

# Print
prn_cmd = g_cmd('prn', Operation.PRN, reg_op)
pri_cmd = g_cmd('pri', Operation.PRI, s_dec_const)

# Raw byte
byte_cmd = (pp.Suppress(pp.CaselessKeyword('.byte')) + us_dec_const) \
    .set_parse_action(lambda s, loc, r: (FPP.issue_byte, (pp.lineno(loc, s), r[0])))

asm_cmd = ldi_cmd \
    | addi_cmd \
    | subi_cmd \
    | muli_cmd \
    | divi_cmd \
    | mov_cmd \
    | add_cmd \
    | prn_cmd \
    | pri_cmd \
    | byte_cmd

# Fail on unknown command
unknown = pp.Regex('.+').set_parse_action(lambda s, loc, r: (FPP.on_fail, (pp.lineno(loc, s), r[0])))

# One instruction per line
statement = asm_cmd + pp.Opt(comment) + pp.Suppress(pp.LineEnd())

program = pp.ZeroOrMore(statement | comment | unknown)
