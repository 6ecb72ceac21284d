"""Intcode CPU: opcode decoder and ALU."""
