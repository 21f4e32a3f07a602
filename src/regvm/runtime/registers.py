from typing import Iterable, Protocol

from regvm.common.hwconf import REGISTER_COUNT


class Registers(Protocol):
    def get(self, index: int) -> int:
        ...

    def set(self, index: int, value: int) -> None:
        ...


class RegisterFile:
    gp: list[int]  # R0-R3

    def __init__(self, initial: Iterable[int] | None = None):
        self.gp = [0] * REGISTER_COUNT

        if initial is not None:
            values = list(initial)

            if len(values) != REGISTER_COUNT:
                raise ValueError(f'Expected {REGISTER_COUNT} initial register values, got {len(values)}')

            self.gp = [int(v) for v in values]

    def check_index(self, index: int):
        if not 0 <= index < REGISTER_COUNT:
            raise IndexError(f'Invalid register index {index}')

    def get(self, index: int) -> int:
        self.check_index(index)
        return self.gp[index]

    def set(self, index: int, value: int) -> None:
        self.check_index(index)
        self.gp[index] = value

    def dump(self) -> list[int]:
        return list(self.gp)

    def __repr__(self) -> str:
        return ' '.join(f'R{i}:{v}' for i, v in enumerate(self.gp))
