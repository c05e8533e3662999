"""Character stream interfaces and their string-backed implementations."""

from .streams import Input, Output, InputStatus, StringInput, StringOutput

__all__ = [
    'Input', 'Output', 'InputStatus',
    'StringInput', 'StringOutput',
]
