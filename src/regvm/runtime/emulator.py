import sys
from pathlib import Path
import logging as lg
import traceback
from typing import TextIO

import click

from regvm.common.vmconf import VMOptions, load_options
from regvm.runtime.registers import RegisterFile
import regvm.runtime.cpu as cpu


EXIT_OK = 0
EXIT_VM_ERROR = 2
EXIT_KEYBOARD = 3
EXIT_EXEC_ERROR = 100


def execute(program: bytes, options: VMOptions | None = None, out: TextIO | None = None) -> cpu.CPU:
    if options is None:
        options = VMOptions()

    regs = RegisterFile(options.registers)
    proc = cpu.CPU(program, regs, options, out)

    lg.debug(f'Executing {len(program)} bytes')
    proc.run()
    lg.debug(f'Program finished after {proc.executed} steps')

    return proc


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-c', '--config', type=Path, help='VM options file (TOML)')
@click.option('--strict', is_flag=True, help='Fail on unassigned opcodes')
@click.option('--extended', is_flag=True, help='Enable add-register into R3')
@click.option('--trace', is_flag=True, help='Dump registers after every step')
@click.argument('rom_filename', type=Path)
def run(
    verbose: bool,
    config: Path | None,
    strict: bool,
    extended: bool,
    trace: bool,
    rom_filename: Path
):
    lg.basicConfig(level=lg.DEBUG if verbose or trace else lg.INFO)
    lg.info("REGVM")

    try:
        options = load_options(config) if config is not None else VMOptions()
        # Flags only switch features on over the file values
        options.update(strict=strict or None, extended=extended or None, trace=trace or None)

        rom = rom_filename.read_bytes()
        execute(rom, options)
        sys.exit(EXIT_OK)

    except cpu.VMError as e:
        lg.info(f'Execution halted on VM error: {e}')
        sys.exit(EXIT_VM_ERROR)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_EXEC_ERROR)


if __name__ == '__main__':
    run()
