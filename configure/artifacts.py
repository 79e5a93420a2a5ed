"""Text renderers for the generated config source and makefile."""
from __future__ import annotations

from pathlib import PurePath
from typing import List, Sequence

from core.template import Literal, Template

from .configuration import Configuration
from .options import ConfigureSettings


_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}

_VERSION_NAMES = ("major_version", "minor_version", "micro_version")

_MAKE_RULES = """\
# Rules
$(TARGET): $(SOURCES_UNIQUE)
\tgo build -o $@

clean:
\trm -f $(TARGET)

distclean: clean

install: $(TARGET)
\tmkdir -p $(DESTDIR)$(bindir) && cp $(TARGET) $(DESTDIR)$(bindir)/$(TARGET)

uninstall:
\trm -f $(DESTDIR)$(bindir)/$(TARGET)

.PHONY: install uninstall distclean clean
"""


def go_quote(value: str) -> str:
    """Quote ``value`` as a Go interpreted string literal."""

    out: List[str] = ['"']
    for char in value:
        escaped = _GO_ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif char.isprintable():
            out.append(char)
        elif ord(char) < 0x80:
            out.append(f"\\x{ord(char):02x}")
        elif ord(char) <= 0xFFFF:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(f"\\U{ord(char):08x}")
    out.append('"')
    return "".join(out)


def to_make_syntax(template: Template) -> str:
    """Rewrite ``${name}`` references of ``template`` as make ``$(name)`` macros."""

    parts: List[str] = []
    for segment in template:
        if isinstance(segment, Literal):
            parts.append(segment.text)
        else:
            parts.append(f"$({segment.name})")
    return "".join(parts)


def render_config_source(configuration: Configuration, settings: ConfigureSettings) -> str:
    """Render the Go file holding every fully resolved value and the version."""

    lines: List[str] = []
    if settings.package:
        lines.append(f"package {settings.package}")
        lines.append("")

    lines.append(f"var {settings.config_variable} = struct {{")
    values: List[str] = []
    for index, descriptor in enumerate(configuration.descriptors_by_field()):
        if index:
            lines.append("")
        lines.append(f"\t// {descriptor.description}")
        lines.append(f"\t{descriptor.field} string")
        values.append(go_quote(configuration.expand(descriptor.name)))

    if values:
        lines.append("")
    lines.append("\t// Application version")
    lines.append("\tVersion []int")
    lines.append("}{")
    lines.extend(f"\t{value}," for value in values)
    lines.append("\t[]int{" + ", ".join(str(part) for part in settings.version) + "},")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_makefile(configuration: Configuration, settings: ConfigureSettings, *, target: str) -> str:
    """Render the makefile with variables listed in dependency order."""

    lines: List[str] = ["#!/usr/bin/make -f", "", "# Variables"]
    for name in configuration.ordered_names:
        lines.append(f"{name} = {to_make_syntax(configuration.template(name))}")

    lines.extend(_version_lines(settings.version))
    lines.append("")
    lines.append(f"TARGET = {target}")
    lines.append("")
    lines.append("SOURCES ?=")
    lines.append("SOURCES += $(wildcard *.go)")
    lines.append("SOURCES_UNIQUE = $(sort $(SOURCES))")
    lines.append("")
    return "\n".join(lines) + "\n" + _MAKE_RULES


def render_makefile_stub(makefile: str) -> str:
    """Render the top-level ``Makefile`` that includes the generated one."""

    return f"include {PurePath(makefile).name}\n"


def _version_lines(version: Sequence[int]) -> List[str]:
    lines = ["version = " + ".".join(str(part) for part in version)]
    for name, part in zip(_VERSION_NAMES, version):
        lines.append(f"{name} = {part}")
    return lines


__all__ = [
    "go_quote",
    "render_config_source",
    "render_makefile",
    "render_makefile_stub",
    "to_make_syntax",
]
