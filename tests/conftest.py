import pytest

from regvm.common.vmconf import VMOptions
from regvm.runtime.registers import RegisterFile


@pytest.fixture
def regs():
    yield RegisterFile()


@pytest.fixture
def strict_options():
    yield VMOptions().update(strict=True)


@pytest.fixture
def extended_options():
    yield VMOptions().update(extended=True)
