import io
import logging

import pytest

import regvm.runtime.cpu as cpu
from regvm.common.vmconf import VMOptions
from regvm.runtime.registers import RegisterFile

from unit_utils import program, ldi, addi, subi, muli, divi, mov, add, prn, pri


def run(buf: bytes, regs: RegisterFile, options: VMOptions | None = None) -> cpu.CPU:
    proc = cpu.CPU(buf, regs, options)
    proc.run()
    return proc


def test_load_add_print(regs, capsys):
    run(program(ldi(0, 5), addi(0, 3), prn(0)), regs)

    assert capsys.readouterr().out == '8\n'
    assert regs.get(0) == 8


def test_divide_by_zero_no_output(regs, capsys):
    buf = program(ldi(1, -4), divi(1, 0))

    with pytest.raises(cpu.DivisionByZero) as e:
        run(buf, regs)

    assert e.value.offset == 6
    assert regs.get(1) == -4
    assert capsys.readouterr().out == ''


def test_division_by_zero_is_zero_division_error(regs):
    with pytest.raises(ZeroDivisionError):
        run(program(divi(2, 0)), regs)


@pytest.mark.parametrize('start, step, expected', [
    (10, 3, 13),
    (-10, 3, -7),
    (0, -4294967295, -4294967295)
])
def test_addi(regs, start, step, expected):
    run(program(ldi(2, start), addi(2, step)), regs)
    assert regs.get(2) == expected


@pytest.mark.parametrize('start, step, expected', [
    (10, 3, 7),
    (3, 10, -7),
    (-4294967295, 4294967295, -8589934590)
])
def test_subi(regs, start, step, expected):
    run(program(ldi(3, start), subi(3, step)), regs)
    assert regs.get(3) == expected


@pytest.mark.parametrize('start, step, expected', [
    (6, 7, 42),
    (-6, 7, -42),
    (4294967295, 4294967295, 4294967295 * 4294967295)
])
def test_muli(regs, start, step, expected):
    run(program(ldi(0, start), muli(0, step)), regs)
    assert regs.get(0) == expected


@pytest.mark.parametrize('start, divisor, expected', [
    (7, 2, 3),
    (-7, 2, -3),
    (7, -2, -3),
    (-7, -2, 3),
    (1, 5, 0),
    (-1, 5, 0),
    (4294967295, 1, 4294967295)
])
def test_divi_truncates_toward_zero(regs, start, divisor, expected):
    run(program(ldi(1, start), divi(1, divisor)), regs)
    assert regs.get(1) == expected


def test_mov_copies_value(regs):
    run(program(ldi(0, 11), mov(0, 2), addi(0, 1)), regs)

    assert regs.get(0) == 12
    assert regs.get(2) == 11


def test_mov_into_self(regs):
    run(program(ldi(3, -9), mov(3, 3)), regs)
    assert regs.get(3) == -9


def test_add_register(regs):
    run(program(ldi(0, 2), ldi(1, 40), add(0, 1)), regs)

    assert regs.get(1) == 42
    assert regs.get(0) == 2


def test_add_register_to_itself(regs):
    run(program(ldi(2, 21), add(2, 2)), regs)
    assert regs.get(2) == 42


def test_add_into_r3_needs_extended_set(regs, extended_options):
    buf = program(ldi(0, 1), ldi(3, 2), [0x36])

    run(buf, regs)
    assert regs.get(3) == 2

    other = RegisterFile()
    run(buf, other, extended_options)
    assert other.get(3) == 3


def test_print_order(regs, capsys):
    run(program(pri(-5), ldi(1, 0), prn(1), pri(42), prn(2)), regs)
    assert capsys.readouterr().out == '-5\n0\n42\n0\n'


def test_print_immediate_has_no_register_effect(regs, capsys):
    run(program(pri(7)), regs)

    assert capsys.readouterr().out == '7\n'
    assert regs.dump() == [0, 0, 0, 0]


def test_output_stream(regs):
    out = io.StringIO()
    proc = cpu.CPU(program(pri(1), pri(-2)), regs, out=out)
    proc.run()

    assert out.getvalue() == '1\n-2\n'


def test_truncated_after_sign(regs):
    buf = bytes([0x01, 0xFE])

    with pytest.raises(cpu.TruncatedOperand) as e:
        run(buf, regs)

    assert e.value.offset == 1


def test_truncated_before_sign(regs):
    with pytest.raises(cpu.TruncatedOperand) as e:
        run(bytes([0x01]), regs)

    assert e.value.offset == 0


def test_truncated_mid_magnitude(regs, capsys):
    buf = program(pri(3), [0x35, 0xFE, 0x00, 0x00])

    with pytest.raises(cpu.TruncatedOperand) as e:
        run(buf, regs)

    assert e.value.offset == 9
    assert capsys.readouterr().out == '3\n'


def test_invalid_sign_byte(regs):
    buf = program(ldi(0, 1), [0x05, 0x00, 0, 0, 0, 1])

    with pytest.raises(cpu.InvalidSignByte) as e:
        run(buf, regs)

    assert e.value.offset == 7
    assert e.value.value == 0x00
    assert regs.get(0) == 1


def test_unassigned_opcode_skipped(regs, capsys):
    buf = program([0x00], pri(1), [0xEE, 0xEE], pri(2))

    proc = run(buf, regs)

    assert capsys.readouterr().out == '1\n2\n'
    assert proc.executed == 5
    assert proc.ip == len(buf)


def test_unassigned_opcode_strict(regs, strict_options, capsys):
    buf = program(pri(1), [0xEE], pri(2))

    with pytest.raises(cpu.UnassignedOpcode) as e:
        run(buf, regs, strict_options)

    assert e.value.offset == 6
    assert e.value.value == 0xEE
    assert capsys.readouterr().out == '1\n'


def test_empty_program(regs):
    proc = run(bytes(), regs)

    assert proc.done
    assert proc.executed == 0


def test_step(regs):
    proc = cpu.CPU(program(ldi(0, 4), [0x00], mov(0, 1)), regs)

    instr = proc.step()
    assert instr.mnemonic == 'ldi r0'
    assert proc.ip == 6

    assert proc.step() is None
    assert proc.ip == 7

    assert proc.step().mnemonic == 'mov r0 r1'
    assert proc.done
    assert regs.get(1) == 4

    with pytest.raises(cpu.EndOfProgram):
        proc.step()


def test_deterministic(capsys):
    buf = program(ldi(0, 3), muli(0, -7), mov(0, 2), divi(2, 2), prn(2), add(2, 0), prn(0))
    states = []

    for _ in range(2):
        regs = RegisterFile()
        run(buf, regs)
        states.append((regs.dump(), capsys.readouterr().out))

    assert states[0] == states[1]
    assert states[0] == ([-31, 0, -10, 0], '-10\n-31\n')


def test_initial_registers(capsys):
    regs = RegisterFile([1, 2, 3, 4])
    run(program(prn(3), add(3, 0)), regs)

    assert capsys.readouterr().out == '4\n'
    assert regs.get(0) == 5


def test_program_is_not_mutated(regs):
    buf = bytearray(program(ldi(0, 1)))
    proc = cpu.CPU(buf, regs)
    buf[0] = 0x00
    proc.run()

    assert regs.get(0) == 1


def test_trace_dumps_registers(regs, caplog):
    caplog.set_level(logging.DEBUG)
    run(program(ldi(1, 9)), regs, VMOptions().update(trace=True))

    assert 'IP:6 R0:0 R1:9 R2:0 R3:0' in caplog.text
