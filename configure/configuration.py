"""Resolved configure variables backed by the placeholder engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

from core.template import Expander, Template, Variable, order

from .options import DEFAULT_OPTIONS, OptionDescriptor


@dataclass(slots=True)
class Configuration:
    """Every configure variable with its resolved value and emission order."""

    descriptors: Tuple[OptionDescriptor, ...]
    registry: Mapping[str, Variable]
    resolved: Mapping[str, Tuple[str, FrozenSet[str]]]
    ordered_names: Tuple[str, ...]

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[OptionDescriptor] = DEFAULT_OPTIONS) -> "Configuration":
        items = tuple(descriptors)
        registry: Dict[str, Variable] = {}
        for descriptor in items:
            registry[descriptor.name] = Variable.from_raw(descriptor.name, descriptor.default)

        resolved = Expander(registry).expand_all()
        dependencies = {name: deps for name, (_, deps) in resolved.items()}
        return cls(
            descriptors=items,
            registry=registry,
            resolved=resolved,
            ordered_names=tuple(order(registry, dependencies)),
        )

    @property
    def values(self) -> Dict[str, str]:
        return {name: value for name, (value, _) in self.resolved.items()}

    def expand(self, name: str) -> str:
        value, _ = self.resolved.get(name, ("", frozenset()))
        return value

    def dependencies(self, name: str) -> FrozenSet[str]:
        _, deps = self.resolved.get(name, ("", frozenset()))
        return deps

    def template(self, name: str) -> Template:
        return self.registry[name].template

    def descriptor(self, name: str) -> OptionDescriptor:
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def descriptors_by_field(self) -> List[OptionDescriptor]:
        return sorted(self.descriptors, key=lambda descriptor: descriptor.field)


__all__ = ["Configuration"]
