"""Exceptions raised by the packet generator."""


class PacketError(Exception):
    """Base class for packet generator errors."""


class PacketGenerationError(PacketError):
    """Raised when a packet cannot be rendered or finalized.

    Generation is atomic: when this is raised no partial buffer exists and the
    caller may retry with the same input.
    """
