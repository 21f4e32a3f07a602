# Register file
REGISTER_COUNT = 4

# Immediate operand: sign byte followed by a big-endian magnitude
SIGN_POSITIVE = 0xFE
SIGN_NEGATIVE = 0xFF
MAGNITUDE_SIZE = 4
IMMEDIATE_SIZE = 1 + MAGNITUDE_SIZE
MAX_MAGNITUDE = 0xFFFFFFFF
