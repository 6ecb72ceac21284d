"""
Intcode VM — Error Types

Every failure the VM reports derives from IntcodeError. All of them are
fatal to the execution that raised them: the emulator records the fault,
moves to FAULTED and never produces another output.

Each class carries a stable ``code`` string so callers (the CLI, test
harnesses) can branch on the kind of failure without parsing messages.
"""

from typing import Optional


class IntcodeError(Exception):
    """Base class for all Intcode VM errors."""
    code = 'intcode_error'


class ProgramParseError(IntcodeError):
    """Program text contained a token that is not a signed 64-bit integer."""
    code = 'parse_error'

    def __init__(self, message: str = "Invalid input", token: Optional[str] = None,
                 index: Optional[int] = None):
        self.token = token
        self.index = index
        if token is not None:
            message = f"{message}: token {index} is {token!r}"
        super().__init__(message)


class DecodeError(IntcodeError):
    """Raised when the cell at the instruction pointer cannot be decoded."""
    code = 'decode_error'

    def __init__(self, message: str, address: Optional[int] = None):
        self.address = address
        if address is not None:
            message = f"{message} at address {address}"
        super().__init__(message)


class InvalidOpcode(DecodeError):
    code = 'invalid_opcode'

    def __init__(self, opcode: int, address: Optional[int] = None):
        self.opcode = opcode
        super().__init__(f"Invalid opcode {opcode}", address)


class InvalidDestinationMode(DecodeError):
    code = 'invalid_destination_mode'

    def __init__(self, param: int, address: Optional[int] = None):
        self.param = param
        super().__init__(
            f"Invalid addressing mode for destination (parameter {param})", address)


class InvalidParameterMode(DecodeError):
    code = 'invalid_parameter_mode'

    def __init__(self, mode: int, param: int, address: Optional[int] = None):
        self.mode = mode
        self.param = param
        super().__init__(f"Invalid addressing mode {mode} for parameter {param}", address)


class InvalidRead(IntcodeError):
    """Input instruction could not obtain a complete 8-byte record."""
    code = 'invalid_read'

    def __init__(self, message: str = "Invalid read"):
        super().__init__(message)


class InvalidWrite(IntcodeError):
    """Output instruction's sink rejected the record."""
    code = 'invalid_write'

    def __init__(self, message: str = "Invalid write"):
        super().__init__(message)


class InvalidAddress(IntcodeError):
    code = 'invalid_address'

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Invalid memory address {address}")


class NoOutputError(IntcodeError):
    code = 'no_output'

    def __init__(self, message: str = "No return value"):
        super().__init__(message)


class SearchError(IntcodeError):
    code = 'search_failed'
