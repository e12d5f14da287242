"""A CHIP-8 interpreter, a simple assembler and a pygame window to run programs."""

__version__ = "0.1.0"

__all__ = ["__version__"]