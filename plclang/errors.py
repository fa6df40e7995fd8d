from typing import Optional


class PlcError(Exception):
    """Base exception for every failure raised by the PLC toolchain."""
    kind = 'Error'

    def __init__(self, message: str, index: Optional[int] = None):
        text = f"{self.kind}: {message}"
        if index is not None:
            text += f" at index {index}"
        super().__init__(text)
        self.message = message
        self.index = index


class LexError(PlcError):
    """Malformed source text; `index` is the offending character offset."""
    kind = 'LexError'


class ParseError(PlcError):
    """Unexpected or missing token; `index` is the offending token index."""
    kind = 'ParseError'


class AnalysisError(PlcError):
    kind = 'AnalysisError'


class PlcRuntimeError(PlcError):
    kind = 'RuntimeError'
