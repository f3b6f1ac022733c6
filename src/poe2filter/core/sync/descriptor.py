"""
Source descriptor parsing.

A descriptor names a remote filter source as ``type:payload``, for example
``github:NeverSinkDev/NeverSink-PoE2litefilter``. A handful of friendly
aliases expand to their fully qualified form before parsing, and the
expanded form is what gets recorded in the watermark store.
"""

from dataclasses import dataclass

from poe2filter.core.exceptions import MalformedDescriptor

ALIASES: dict[str, str] = {
    "neversink-lite": "github:NeverSinkDev/NeverSink-PoE2litefilter",
    "cdrg": "github:cdrg/cdr-poe2filter",
}


@dataclass(frozen=True)
class Descriptor:
    """
    A canonical source descriptor.

    Attributes:
        type: Source type tag (e.g., "github")
        payload: Type-specific value, interpreted by the source
    """

    type: str
    payload: str

    def __str__(self) -> str:
        return f"{self.type}:{self.payload}"


def expand_alias(raw: str) -> str:
    """Return the canonical descriptor for a known alias, or ``raw`` unchanged."""
    return ALIASES.get(raw, raw)


def parse(raw: str) -> Descriptor:
    """
    Parse a descriptor string, expanding aliases first.

    Only the ``type:payload`` split happens here. Whether the payload makes
    sense is up to the source that handles the type.

    Args:
        raw: Descriptor or alias as typed by the user

    Returns:
        Descriptor in canonical form

    Raises:
        MalformedDescriptor: If there is no ``:`` or the type is empty
    """
    canonical = expand_alias(raw)
    source_type, sep, payload = canonical.partition(":")
    if not sep:
        raise MalformedDescriptor(raw, "Descriptor must be in the form type:value")
    if not source_type:
        raise MalformedDescriptor(raw, "Descriptor is missing a source type")
    return Descriptor(type=source_type, payload=payload)


__all__ = ["ALIASES", "Descriptor", "expand_alias", "parse"]
