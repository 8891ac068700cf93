"""Tag records exchanged between the event sources and the converter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def _freeze(attributes: Mapping[str, str] | Iterable[tuple[str, str | None]] | None) -> Mapping[str, str]:
    if attributes is None:
        return MappingProxyType({})
    items = attributes.items() if isinstance(attributes, Mapping) else attributes
    return MappingProxyType({key: "" if value is None else str(value) for key, value in items})


@dataclass(frozen=True, slots=True)
class StartTag:
    """Opening tag with its attributes, kept until the element closes."""

    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return an attribute value, or ``default`` when it is absent."""
        return self.attributes.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.attributes

    def __str__(self) -> str:
        attrs = "".join(f' {key}="{value}"' for key, value in self.attributes.items())
        return f"<{self.name}{attrs}>"


@dataclass(frozen=True, slots=True)
class EndTag:
    """Closing tag."""

    name: str

    def __str__(self) -> str:
        return f"</{self.name}>"


__all__ = ["EndTag", "StartTag"]
