"""
Intcode VM — Emulator Core Tests

Tests that prove the emulator executes real Intcode programs. Programs
are the reference examples of the instruction set (arithmetic, modes,
comparisons, jumps, relative base, big numbers) plus targeted programs
for suspension, faults and self-modification.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io

import pytest

from intcode import IntcodeEmulator, MachineState, Program, StopReason
from intcode.errors import (
    InvalidDestinationMode, InvalidOpcode, InvalidRead, InvalidWrite, NoOutputError,
)
from intcode.periph.channels import OutputBuffer, encode_words


def _run(code, inputs=()):
    """Run code with inputs, return outputs."""
    return IntcodeEmulator(code).read_values(inputs).write_to(OutputBuffer()).run()


def _final_memory(code):
    emu = IntcodeEmulator(code)
    emu.run()
    return emu.mem.snapshot()


LARGE = Program.parse(
    "3,21,1008,21,8,20,1005,20,22,107,8,21,20,1006,20,31,1106,0,"
    "36,98,0,0,1002,21,125,20,4,20,1105,1,46,104,999,1105,1,46,"
    "1101,1000,1,20,4,20,1105,1,46,98,99"
)

QUINE = [109, 1, 204, -1, 1001, 100, 1, 100, 1008, 100, 16, 101, 1006, 101, 0, 99]


# ═══════════════════════════════════════════════
# Test Group 1: Memory-only programs (empty I/O)
# ═══════════════════════════════════════════════

class TestEmptyIO:
    """Programs that only touch memory; inspected after halt."""

    def test_add(self):
        assert _final_memory([1, 0, 0, 0, 99]) == [2, 0, 0, 0, 99]

    def test_mul(self):
        assert _final_memory([2, 3, 0, 3, 99]) == [2, 3, 0, 6, 99]

    def test_mul_past_end(self):
        assert _final_memory([2, 4, 4, 5, 99, 0]) == [2, 4, 4, 5, 99, 9801]

    def test_self_modifying_halt(self):
        assert _final_memory([1, 1, 1, 4, 99, 5, 6, 0, 99]) == [30, 1, 1, 4, 2, 5, 6, 0, 99]

    def test_immediate_negative_operand(self):
        assert _final_memory([1101, 100, -1, 4, 0]) == [1101, 100, -1, 4, 99]

    def test_writes_next_instruction(self):
        """The HLT at address 4 only exists because ADD wrote it."""
        emu = IntcodeEmulator([1101, 49, 50, 4, 0])
        assert emu.run() == []
        assert emu.halted
        assert emu[4] == 99

    def test_write_beyond_program(self):
        emu = IntcodeEmulator([1101, 3, 4, 1000, 99])
        emu.run()
        assert emu[1000] == 7
        assert emu[999] == 0


# ═══════════════════════════════════════════════
# Test Group 2: Input / output programs
# ═══════════════════════════════════════════════

class TestIO:
    def test_echo(self):
        emu = IntcodeEmulator([3, 0, 4, 0, 99]).read_values([1]).write_to(OutputBuffer())
        assert emu.run_to_output() == 1

    def test_equal_position(self):
        prog = [3, 9, 8, 9, 10, 9, 4, 9, 99, -1, 8]
        assert _run(prog, [8]) == [1]
        assert _run(prog, [7]) == [0]

    def test_equal_immediate(self):
        prog = [3, 3, 1108, -1, 8, 3, 4, 3, 99]
        assert _run(prog, [8]) == [1]
        assert _run(prog, [7]) == [0]

    def test_less_than_position(self):
        prog = [3, 9, 7, 9, 10, 9, 4, 9, 99, -1, 8]
        assert _run(prog, [7]) == [1]
        assert _run(prog, [8]) == [0]

    def test_less_than_immediate(self):
        prog = [3, 3, 1107, -1, 8, 3, 4, 3, 99]
        assert _run(prog, [7]) == [1]
        assert _run(prog, [8]) == [0]

    def test_jump_position(self):
        prog = [3, 12, 6, 12, 15, 1, 13, 14, 13, 4, 13, 99, -1, 0, 1, 9]
        assert _run(prog, [1]) == [1]
        assert _run(prog, [0]) == [0]

    def test_jump_immediate(self):
        prog = [3, 3, 1105, -1, 9, 1101, 0, 0, 12, 4, 12, 99, 1]
        assert _run(prog, [1]) == [1]
        assert _run(prog, [0]) == [0]

    def test_large_comparison(self):
        assert LARGE.start().read_values([7]).run() == [999]
        assert LARGE.start().read_values([8]).run() == [1000]
        assert LARGE.start().read_values([9]).run() == [1001]

    def test_relative_quine(self):
        assert _run(QUINE) == QUINE

    def test_big_multiply(self):
        assert _run([1102, 34915192, 34915192, 7, 4, 7, 99, 0]) == [1219070632396864]

    def test_big_immediate(self):
        assert _run([104, 1125899906842624, 99]) == [1125899906842624]

    def test_input_from_file_like(self):
        emu = IntcodeEmulator([3, 9, 8, 9, 10, 9, 4, 9, 99, -1, 8])
        emu.read_from(io.BytesIO(encode_words([8]))).write_to(OutputBuffer())
        assert emu.run() == [1]

    def test_output_buffer_read_back(self):
        emu = IntcodeEmulator([104, 1, 104, 2, 99]).write_to(OutputBuffer())
        emu.run_to_output()
        assert emu.output_values == [1]
        emu.run()
        assert emu.output_values == [1, 2]

    def test_output_values_needs_buffer(self):
        emu = IntcodeEmulator([99])
        with pytest.raises(TypeError):
            emu.output_values

    def test_null_output_still_returns_values(self):
        assert IntcodeEmulator([104, 5, 99]).run() == [5]


# ═══════════════════════════════════════════════
# Test Group 3: Driving modes and suspension
# ═══════════════════════════════════════════════

class TestDrivingModes:
    def test_run_to_output_pauses_after_output(self):
        emu = IntcodeEmulator([104, 7, 104, 8, 99])
        assert emu.run_to_output() == 7
        assert emu.state == MachineState.SUSPENDED
        assert emu.ptr == 2
        assert emu.run_to_output() == 8
        assert emu.run_to_output() is None
        assert emu.halted

    def test_feed_while_suspended(self):
        emu = IntcodeEmulator([3, 0, 4, 0, 3, 0, 4, 0, 99]).read_values([1])
        assert emu.run_to_output() == 1
        emu.feed_input([2])
        assert emu.run_to_output() == 2
        assert emu.run_to_output() is None

    def test_feed_requires_seekable_input(self):
        emu = IntcodeEmulator([3, 0, 99])
        with pytest.raises(io.UnsupportedOperation):
            emu.feed_input([1])

    def test_run_with_patches(self):
        emu = Program.parse("1,0,0,0,99").start()
        emu.run_with([(1, 4), (2, 4)])
        assert emu[0] == 198

    def test_run_with_equals_edited_program(self):
        code = [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50]
        patched = IntcodeEmulator(code)
        patched.run_with([(1, 10), (2, 9)])

        edited = list(code)
        edited[1], edited[2] = 10, 9
        direct = IntcodeEmulator(edited)
        direct.run()
        assert patched.mem.snapshot() == direct.mem.snapshot()

    def test_run_return(self):
        assert IntcodeEmulator([104, 1, 104, 2, 99]).run_return() == 2

    def test_run_return_without_output(self):
        with pytest.raises(NoOutputError):
            IntcodeEmulator([99]).run_return()

    def test_outputs_generator(self):
        gen = IntcodeEmulator(QUINE).outputs()
        assert next(gen) == 109
        assert next(gen) == 1

    def test_iterator_steps(self):
        steps = list(IntcodeEmulator([1101, 1, 1, 0, 104, 5, 99]))
        assert steps == [None, 5]

    def test_step_results(self):
        emu = IntcodeEmulator([1101, 1, 1, 0, 104, 5, 99])
        assert emu.step() is None
        assert emu.step() == StopReason.OUTPUT
        assert emu.last_output == 5
        assert emu.step() == StopReason.HALT
        assert emu.steps == 3

    def test_halt_is_sticky(self):
        emu = IntcodeEmulator([99, 104, 1])
        assert emu.step() == StopReason.HALT
        assert emu.ptr == 1
        assert emu.step() == StopReason.HALT
        assert emu.run() == []

    def test_jump_does_not_advance(self):
        emu = IntcodeEmulator([1105, 1, 7, 99, 0, 0, 0, 104, 3, 99])
        emu.step()
        assert emu.ptr == 7
        assert emu.run() == [3]

    def test_adjust_base(self):
        emu = IntcodeEmulator([109, 19, 109, -4, 99])
        emu.run()
        assert emu.base == 15

    def test_adjust_base_wraps(self):
        emu = IntcodeEmulator([109, (1 << 63) - 1, 109, 1, 99])
        emu.run()
        assert emu.base == -(1 << 63)

    def test_waiting_input_state(self):
        emu = IntcodeEmulator([3, 0, 99])
        seen = []

        class _Probe(io.RawIOBase):
            def __init__(self):
                super().__init__()
                self._data = bytearray(encode_words([5]))

            def readable(self):
                return True

            def readinto(self, b):
                seen.append(emu.state)
                n = min(len(b), len(self._data))
                b[:n] = self._data[:n]
                del self._data[:n]
                return n

        emu.read_from(_Probe())
        emu.run()
        assert seen[0] == MachineState.WAITING_INPUT
        assert emu[0] == 5


# ═══════════════════════════════════════════════
# Test Group 4: Faults
# ═══════════════════════════════════════════════

class _RejectingSink(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        raise OSError("sink closed")


class TestFaults:
    def test_invalid_opcode(self):
        emu = IntcodeEmulator([1101, 1, 1, 5, 42])
        with pytest.raises(InvalidOpcode) as exc:
            emu.run()
        assert exc.value.opcode == 42
        assert exc.value.address == 4
        assert emu.faulted
        assert emu.fault is exc.value

    def test_fault_is_sticky(self):
        emu = IntcodeEmulator([42])
        with pytest.raises(InvalidOpcode):
            emu.step()
        with pytest.raises(InvalidOpcode):
            emu.step()
        with pytest.raises(InvalidOpcode):
            emu.run_to_output()

    def test_read_from_empty_input(self):
        emu = IntcodeEmulator([3, 0, 99])
        with pytest.raises(InvalidRead):
            emu.run()
        assert emu.state == MachineState.FAULTED

    def test_input_exhausted(self):
        emu = IntcodeEmulator([3, 0, 3, 0, 99]).read_values([1])
        with pytest.raises(InvalidRead):
            emu.run()
        assert emu[0] == 1

    def test_rejected_write(self):
        emu = IntcodeEmulator([104, 1, 99]).write_to(_RejectingSink())
        with pytest.raises(InvalidWrite):
            emu.run()
        assert emu.last_output is None
        assert emu.faulted

    def test_text_input_stream(self):
        emu = IntcodeEmulator([3, 0, 4, 0, 99]).read_from(io.StringIO("abcdefgh"))
        with pytest.raises(InvalidRead):
            emu.step()
        assert emu.state == MachineState.FAULTED
        assert isinstance(emu.fault, InvalidRead)
        with pytest.raises(InvalidRead):
            emu.step()

    def test_sink_without_room(self):
        class _Blocked(io.RawIOBase):
            def writable(self):
                return True

            def write(self, b):
                return None

        emu = IntcodeEmulator([104, 5, 99]).write_to(_Blocked())
        with pytest.raises(InvalidWrite):
            emu.run()
        assert emu.faulted

    def test_immediate_destination(self):
        emu = IntcodeEmulator([11101, 1, 1, 0, 99])
        with pytest.raises(InvalidDestinationMode):
            emu.run()

    def test_outputs_before_fault_are_kept(self):
        emu = IntcodeEmulator([104, 1, 42]).write_to(OutputBuffer())
        with pytest.raises(InvalidOpcode):
            emu.run()
        assert emu.output_values == [1]

    def test_jump_to_negative_address(self):
        emu = IntcodeEmulator([1106, 0, -3])
        with pytest.raises(InvalidOpcode) as exc:
            emu.run()
        assert exc.value.address == -3


# ═══════════════════════════════════════════════
# Test Group 5: Trace
# ═══════════════════════════════════════════════

class TestTrace:
    def test_trace_lines(self):
        emu = IntcodeEmulator([1101, 100, -1, 4, 0])
        emu.enable_trace()
        emu.run()
        lines = emu.get_trace().splitlines()
        assert len(lines) == 2
        assert "ADD #100, #-1, [4]" in lines[0]
        assert "HLT" in lines[1]
        assert "base=0" in lines[0]

    def test_trace_disabled_by_default(self):
        emu = IntcodeEmulator([99])
        emu.run()
        assert emu.get_trace() == ""

    def test_clear_trace(self):
        emu = IntcodeEmulator([99])
        emu.enable_trace()
        emu.run()
        emu.clear_trace()
        assert emu.get_trace() == ""
