"""
Intcode VM — Configuration Constants and Profiles
==================================================

Word format, driver defaults and logging defaults live here so the CLI
and the drivers agree on one set of values. CLI flags override them per
invocation; nothing here is read from the environment.
"""

import logging


# =============================================================================
#  WORD FORMAT (I/O channel records and memory cells)
# =============================================================================
WORD_SIZE = 8              # bytes per I/O record
WORD_FORMAT = '<q'         # little-endian signed 64-bit
WORD_BITS = 64
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1


# =============================================================================
#  AMPLIFIER PROFILES
#  series   : each amplifier runs once, output of one is input of the next
#  feedback : the last amplifier feeds the first until the last one halts
# =============================================================================
AMPLIFIER_PROFILES = {
    "series": {
        "phases": (0, 1, 2, 3, 4),
        "feedback": False,
        "description": "Single pass through five amplifiers (phases 0-4)",
    },
    "feedback": {
        "phases": (5, 6, 7, 8, 9),
        "feedback": True,
        "description": "Feedback loop until the last amplifier halts (phases 5-9)",
    },
}

INITIAL_SIGNAL = 0


# =============================================================================
#  NOUN / VERB PATCHING
# =============================================================================
NOUN_ADDRESS = 1
VERB_ADDRESS = 2
RESULT_ADDRESS = 0
NOUN_VERB_RANGE = range(100)


# =============================================================================
#  LOGGING
# =============================================================================
LOGGER_NAME = "intcode"
DEFAULT_LEVEL = logging.DEBUG
DEFAULT_CONSOLE_LEVEL = logging.WARNING

FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"
