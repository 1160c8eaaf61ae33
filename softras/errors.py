from __future__ import annotations


class ContractViolation(AssertionError):
    """Caller broke the rasterizer's input contract (programmer error)."""


class InvalidHandleError(ContractViolation):
    pass


class IndexOutOfRangeError(ContractViolation):
    pass


class ColorRangeError(ContractViolation):
    pass


class MissingTextureError(ContractViolation):
    pass


class BufferLengthError(ContractViolation):
    """Per-vertex attribute buffers disagree on the vertex count."""


class ResourceError(RuntimeError):
    """A texture, model or GPU resource could not be loaded."""
