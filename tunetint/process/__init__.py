# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Perceptual color processing for Tunetint.

All color math lives here. Nothing in this package writes style state;
it only computes complete, self-consistent variable sets.
"""

from tunetint.process.modifiers import apply_modifiers
from tunetint.process.processor import ColorProcessor
from tunetint.process.variables import VARIABLE_NAMES

__all__ = ["ColorProcessor", "VARIABLE_NAMES", "apply_modifiers"]
