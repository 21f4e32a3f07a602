import logging as lg
import tomllib
from pathlib import Path

from regvm.common.hwconf import REGISTER_COUNT


class VMOptions:
    strict: bool         # Fail on unassigned opcodes instead of skipping them
    extended: bool       # Enable register-to-register add into R3
    trace: bool          # Dump registers after every step
    registers: list[int]

    def __init__(self):
        self.strict = False
        self.extended = False
        self.trace = False
        self.registers = [0] * REGISTER_COUNT

    def update(
        self,
        strict: bool | None = None,
        extended: bool | None = None,
        trace: bool | None = None,
        registers: list[int] | None = None
    ):
        if strict is not None:
            self.strict = check_flag('strict', strict)

        if extended is not None:
            self.extended = check_flag('extended', extended)

        if trace is not None:
            self.trace = check_flag('trace', trace)

        if registers is not None:
            if not isinstance(registers, list) or len(registers) != REGISTER_COUNT:
                raise ValueError(f'Expected a list of {REGISTER_COUNT} register values, got {registers!r}')

            for r in registers:
                if not isinstance(r, int) or isinstance(r, bool):
                    raise ValueError(f'Register value must be an integer, got {r!r}')

            self.registers = list(registers)

        return self


def check_flag(name: str, value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f'Option {name} must be true or false, got {value!r}')

    return value


def parse_options(text: str) -> VMOptions:
    config = tomllib.loads(text)
    vm = config.get('vm', dict())

    unknown = set(vm.keys()) - {'strict', 'extended', 'trace', 'registers'}

    if unknown:
        raise ValueError(f'Unknown VM options: {", ".join(sorted(unknown))}')

    return VMOptions().update(
        strict=vm.get('strict'),
        extended=vm.get('extended'),
        trace=vm.get('trace'),
        registers=vm.get('registers')
    )


def load_options(config_path: Path) -> VMOptions:
    lg.debug(f'Loading VM options from {config_path}')
    return parse_options(config_path.read_text())
