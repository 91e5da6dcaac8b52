# SPDX-License-Identifier: MIT
"""Generators for files derived from an action graph."""

from emcons.generators.compile_commands import CompileCommandsGenerator
from emcons.generators.generator import BaseGenerator, Generator

__all__ = [
    "BaseGenerator",
    "CompileCommandsGenerator",
    "Generator",
]
