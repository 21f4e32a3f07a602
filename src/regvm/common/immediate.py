''' Sign-magnitude immediate operand codec '''

import struct

from regvm.common.hwconf import SIGN_POSITIVE, SIGN_NEGATIVE, IMMEDIATE_SIZE, MAX_MAGNITUDE


def is_sign(byte: int) -> bool:
    return byte in (SIGN_POSITIVE, SIGN_NEGATIVE)


def apply_sign(sign: int, magnitude: int) -> int:
    if sign == SIGN_POSITIVE:
        return magnitude

    if sign == SIGN_NEGATIVE:
        return -magnitude

    raise ValueError(f'Invalid sign byte 0x{sign:02X}')


def unpack_magnitude(buf: bytes) -> int:
    (magnitude,) = struct.unpack('>I', buf)
    return magnitude


def decode(buf: bytes) -> int:
    ''' Decodes a complete 5-byte operand '''
    if len(buf) != IMMEDIATE_SIZE:
        raise ValueError(f'Immediate operand must be {IMMEDIATE_SIZE} bytes, got {len(buf)}')

    return apply_sign(buf[0], unpack_magnitude(buf[1:]))


def encode(value: int) -> bytes:
    magnitude = abs(value)

    if magnitude > MAX_MAGNITUDE:
        raise ValueError(f'Immediate {value} is out of range')

    sign = SIGN_NEGATIVE if value < 0 else SIGN_POSITIVE
    return bytes([sign]) + struct.pack('>I', magnitude)
