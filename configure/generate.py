"""Write the configure artifacts to disk."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List
import os

from .artifacts import render_config_source, render_makefile, render_makefile_stub
from .configuration import Configuration
from .options import DEFAULT_OPTIONS, ConfigureSettings, OptionDescriptor


@dataclass(slots=True)
class ConfigureResult:
    configuration: Configuration
    target: str
    config_path: Path | None = None
    makefile_path: Path | None = None
    stub_path: Path | None = None
    written: List[Path] = field(default_factory=list)


def config_source_name(settings: ConfigureSettings) -> str:
    filename = settings.config_file
    if filename and not filename.endswith(".go"):
        filename += ".go"
    return filename


def resolve_target(settings: ConfigureSettings, directory: Path) -> str:
    """Return the build target, defaulting to the name of ``directory``."""

    if settings.target:
        return settings.target
    return directory.resolve().name


def _write_exclusive(path: Path, text: str) -> None:
    with path.open("x", encoding="utf-8") as handle:
        handle.write(text)


def configure(
    settings: ConfigureSettings | None = None,
    descriptors: Iterable[OptionDescriptor] = DEFAULT_OPTIONS,
    *,
    directory: Path | None = None,
) -> ConfigureResult:
    """Resolve ``descriptors`` and write the config source and makefile.

    The makefile is made executable. A plain ``Makefile`` including it is
    created next to it unless one already exists or it cannot be created.
    """

    settings = settings or ConfigureSettings()
    directory = directory or Path.cwd()
    configuration = Configuration.from_descriptors(descriptors)
    result = ConfigureResult(configuration=configuration, target=resolve_target(settings, directory))

    filename = config_source_name(settings)
    if filename:
        path = directory / filename
        path.write_text(render_config_source(configuration, settings), encoding="utf-8")
        result.config_path = path
        result.written.append(path)

    if settings.makefile:
        path = directory / settings.makefile
        path.write_text(render_makefile(configuration, settings, target=result.target), encoding="utf-8")
        os.chmod(path, 0o755)
        result.makefile_path = path
        result.written.append(path)

        stub = path.parent / "Makefile"
        if stub.name != path.name:
            try:
                _write_exclusive(stub, render_makefile_stub(settings.makefile))
            except OSError:
                # Existing or unwritable Makefile: the generated makefile is still usable.
                pass
            else:
                result.stub_path = stub
                result.written.append(stub)

    return result


__all__ = ["ConfigureResult", "config_source_name", "configure", "resolve_target"]
