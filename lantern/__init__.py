"""Function IR (CFG, expression arena, variables) and simplification passes for Luau decompilation."""

__version__ = "0.1.0"