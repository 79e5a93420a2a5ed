"""Placeholder parsing, expansion and dependency ordering utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Tuple, Union
import heapq
import re


_PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]*)\}")


@dataclass(frozen=True, slots=True)
class Literal:
    """Verbatim text inside a template."""

    text: str


@dataclass(frozen=True, slots=True)
class Reference:
    """A ``${name}`` placeholder inside a template."""

    name: str


Segment = Union[Literal, Reference]
Template = Tuple[Segment, ...]


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    template: Template

    @classmethod
    def from_raw(cls, name: str, raw: str) -> "Variable":
        return cls(name=name, template=parse(raw))


class ExpansionState(Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    DONE = "done"


@dataclass(slots=True)
class ExpansionRecord:
    """Per-variable expansion state, created on first visit."""

    state: ExpansionState = ExpansionState.NOT_STARTED
    value: str = ""
    dependencies: FrozenSet[str] | set[str] = field(default_factory=set)


def parse(raw: str) -> Template:
    """Split *raw* into literal and reference segments.

    Text that does not form a complete ``${...}`` token, such as a lone ``$``
    or an unterminated ``${name``, is kept as literal text. A string without
    any placeholder yields a single literal, even when it is empty.
    """

    segments: List[Segment] = []
    position = 0
    for match in _PLACEHOLDER_PATTERN.finditer(raw):
        if match.start() > position:
            segments.append(Literal(raw[position:match.start()]))
        segments.append(Reference(match.group(1)))
        position = match.end()

    if not segments:
        return (Literal(raw),)
    if position < len(raw):
        segments.append(Literal(raw[position:]))
    return tuple(segments)


def build_registry(values: Mapping[str, str]) -> Dict[str, Variable]:
    """Parse every raw value of *values* exactly once."""

    return {str(name): Variable.from_raw(str(name), str(raw)) for name, raw in values.items()}


@dataclass(slots=True)
class _Frame:
    name: str
    record: ExpansionRecord
    index: int = 0
    parts: List[str] = field(default_factory=list)


class Expander:
    """Resolves variables of a closed registry, caching every result.

    A variable is marked in progress before its segments are visited. A
    reference back to a variable that is still in progress contributes the
    (empty) value and the partial dependency set known at that point, so
    cycles terminate instead of recursing forever. The resulting value of a
    cyclic variable therefore depends on which member is visited first.

    Nested references are followed with an explicit stack of frames, so
    chain length is not bounded by the interpreter's recursion limit.
    """

    def __init__(self, registry: Mapping[str, Variable]) -> None:
        self.registry = registry
        self._records: Dict[str, ExpansionRecord] = {}

    def record(self, name: str) -> ExpansionRecord:
        record = self._records.get(name)
        if record is None:
            record = ExpansionRecord()
            self._records[name] = record
        return record

    def _start(self, name: str) -> _Frame:
        record = self.record(name)
        record.state = ExpansionState.IN_PROGRESS
        record.dependencies = set()
        return _Frame(name=name, record=record)

    def expand(self, name: str) -> Tuple[str, FrozenSet[str]]:
        if name not in self.registry:
            return "", frozenset()

        record = self.record(name)
        if record.state is not ExpansionState.NOT_STARTED:
            # In progress means a cycle: hand back the partial result.
            return record.value, frozenset(record.dependencies)

        stack = [self._start(name)]
        while stack:
            frame = stack[-1]
            template = self.registry[frame.name].template
            if frame.index == len(template):
                stack.pop()
                frame.record.value = "".join(frame.parts)
                frame.record.dependencies = frozenset(frame.record.dependencies)
                frame.record.state = ExpansionState.DONE
                continue

            segment = template[frame.index]
            if isinstance(segment, Literal):
                frame.parts.append(segment.text)
                frame.index += 1
                continue
            target = segment.name
            if target not in self.registry:
                frame.index += 1
                continue

            target_record = self.record(target)
            if target_record.state is ExpansionState.NOT_STARTED:
                # Resume this segment once the target is done.
                stack.append(self._start(target))
                continue

            accumulated = frame.record.dependencies
            partial = frozenset(target_record.dependencies)
            frame.parts.append(target_record.value)
            accumulated.add(target)
            accumulated.update(partial)
            frame.index += 1

        return record.value, record.dependencies

    def expand_all(self) -> Dict[str, Tuple[str, FrozenSet[str]]]:
        """Expand every registered variable, visiting names in sorted order."""

        return {name: self.expand(name) for name in sorted(self.registry)}


def expand(registry: Mapping[str, Variable], name: str) -> Tuple[str, FrozenSet[str]]:
    """Resolve *name* against *registry* using a fresh expansion run."""

    return Expander(registry).expand(name)


def expand_all(registry: Mapping[str, Variable]) -> Dict[str, Tuple[str, FrozenSet[str]]]:
    return Expander(registry).expand_all()


def _dependency_graph(
    names: Iterable[str],
    dependencies: Mapping[str, Iterable[str]],
) -> Dict[str, List[str]]:
    nodes = sorted(set(names))
    in_scope = set(nodes)
    return {
        node: sorted(dep for dep in set(dependencies.get(node, ())) if dep in in_scope)
        for node in nodes
    }


def strongly_connected_components(graph: Mapping[str, Iterable[str]]) -> List[List[str]]:
    """Return the strongly connected components of *graph* (Tarjan).

    Each component is sorted by name. Components are listed with every
    component appearing after the components it has edges into.
    """

    index_of: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    on_stack: set[str] = set()
    stack: List[str] = []
    components: List[List[str]] = []

    def _visit(node: str) -> Iterator[str]:
        index_of[node] = len(index_of)
        lowlink[node] = index_of[node]
        stack.append(node)
        on_stack.add(node)
        return iter(sorted(graph.get(node, ())))

    for root in sorted(graph):
        if root in index_of:
            continue
        work: List[Tuple[str, Iterator[str]]] = [(root, _visit(root))]
        while work:
            node, pending = work[-1]
            descended = False
            for dep in pending:
                if dep not in graph:
                    continue
                if dep not in index_of:
                    work.append((dep, _visit(dep)))
                    descended = True
                    break
                if dep in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[dep])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == index_of[node]:
                component: List[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(sorted(component))
    return components


def order(registry: Iterable[str], dependencies: Mapping[str, Iterable[str]]) -> List[str]:
    """Return every registry name with dependencies ahead of their dependents.

    Names in the same dependency cycle are kept together in sorted order.
    When several groups are ready at once, the one with the smallest name
    goes first, so the result never depends on mapping iteration order.
    """

    graph = _dependency_graph(registry, dependencies)
    components = strongly_connected_components(graph)
    owner: Dict[str, int] = {}
    for position, members in enumerate(components):
        for member in members:
            owner[member] = position

    dependents: Dict[int, set[int]] = {position: set() for position in range(len(components))}
    indegree: Dict[int, int] = {position: 0 for position in range(len(components))}
    for node, deps in graph.items():
        source = owner[node]
        for dep in deps:
            target = owner[dep]
            if target == source or source in dependents[target]:
                continue
            dependents[target].add(source)
            indegree[source] += 1

    ready = [(components[position][0], position) for position, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)
    ordered: List[str] = []

    while ready:
        _, position = heapq.heappop(ready)
        ordered.extend(components[position])
        for dependent in dependents[position]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, (components[dependent][0], dependent))

    return ordered


__all__ = [
    "ExpansionRecord",
    "ExpansionState",
    "Expander",
    "Literal",
    "Reference",
    "Segment",
    "Template",
    "Variable",
    "build_registry",
    "expand",
    "expand_all",
    "order",
    "parse",
    "strongly_connected_components",
]
