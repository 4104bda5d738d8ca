"""
Services package for the workflow compiler.
"""

from .compiler import CompileDriver, compile_workflow

__all__ = [
    "CompileDriver",
    "compile_workflow",
]
