"""
Exception types raised by the signaling package.
"""


class SignalingError(Exception):
    """Base class for all signaling errors."""
    pass


class ContextError(SignalingError):
    """Raised when an execution context is misused or cannot be created."""
    pass
