# SPDX-License-Identifier: MIT
"""Job descriptions for the emcons command line.

A job file is JSON describing one binary: the sources to compile and
how to link them. Example:

    {
        "configuration": "development",
        "optimize_for_size": false,
        "output_dir": "Intermediate/Game",
        "compile": {
            "source_files": ["Source/Game.cpp", "Source/zlib.c"],
            "user_include_paths": ["Source/Public"],
            "definitions": ["WITH_EDITOR=0"],
            "cpp_standard": "c++17",
            "generate_dependencies": true
        },
        "link": {
            "output_path": "Binaries/HTML5/Game.js",
            "libraries": ["ThirdParty/libPhysX.a", "Source/UE4.js"]
        }
    }

Paths are used as written. The object files from the compile section
are linked first, followed by any listed in ``link.object_files``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from emcons.core.build_context import (
    BuildConfiguration,
    CompileEnvironment,
    CppStandard,
    LinkEnvironment,
    PrecompiledHeaderAction,
)
from emcons.core.errors import JobError

if TYPE_CHECKING:
    from emcons.core.action import ActionGraph
    from emcons.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = frozenset(
    ["configuration", "optimize_for_size", "output_dir", "compile", "link"]
)
# Keys taken from the top level rather than the section itself.
_SHARED_KEYS = frozenset(["configuration", "optimize_for_size"])


@dataclass
class Job:
    """One binary to build.

    Attributes:
        output_dir: Directory for object and dependency files.
        compile_env: Sources to compile, if any.
        link_env: How to link the binary, if it is linked.
    """

    output_dir: Path = field(default_factory=lambda: Path("Intermediate"))
    compile_env: CompileEnvironment | None = None
    link_env: LinkEnvironment | None = None

    def build(self, toolchain: Toolchain, graph: ActionGraph) -> None:
        """Add the job's actions to a graph."""
        object_files: list[Path] = []
        if self.compile_env is not None:
            output = toolchain.compile_files(self.compile_env, self.output_dir, graph)
            object_files = [node.path for node in output.object_files]
        if self.link_env is not None:
            self.link_env.object_files = [*object_files, *self.link_env.object_files]
            toolchain.link_files(self.link_env, graph)


def _parse_enum(enum_type: Any, value: Any, key: str, source: str) -> Any:
    try:
        if enum_type is BuildConfiguration:
            return BuildConfiguration.parse(value)
        return enum_type(str(value).lower())
    except (ValueError, AttributeError):
        names = ", ".join(e.value for e in enum_type)
        raise JobError(
            f"invalid value {value!r} for {key!r} (expected one of: {names})",
            context=source,
        ) from None


def _section(
    cls: type, data: Any, shared: dict[str, Any], section: str, source: str
) -> Any:
    if not isinstance(data, dict):
        raise JobError(f"{section!r} must be an object", context=source)

    known = {f.name for f in fields(cls)} - _SHARED_KEYS
    # annotations are strings under postponed evaluation
    list_keys = {f.name for f in fields(cls) if str(f.type).startswith("list[")}
    unknown = sorted(set(data) - known)
    if unknown:
        raise JobError(
            f"unknown keys in {section!r}: {', '.join(unknown)}", context=source
        )

    kwargs = dict(shared)
    for key, value in data.items():
        if key in list_keys and not (
            isinstance(value, list) and all(isinstance(v, str) for v in value)
        ):
            raise JobError(
                f"{section}.{key} must be a list of strings", context=source
            )
        if key == "cpp_standard":
            value = _parse_enum(CppStandard, value, key, source)
        elif key == "precompiled_header_action":
            value = _parse_enum(PrecompiledHeaderAction, value, key, source)
        kwargs[key] = value

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise JobError(f"invalid {section!r} section: {e}", context=source) from e


def parse_job(data: Any, source: str = "<job>") -> Job:
    """Build a Job from decoded JSON.

    Raises:
        JobError: If the description is malformed.
    """
    if not isinstance(data, dict):
        raise JobError("job must be a JSON object", context=source)

    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise JobError(f"unknown keys: {', '.join(unknown)}", context=source)
    if "compile" not in data and "link" not in data:
        raise JobError("job has neither a 'compile' nor a 'link' section", source)

    shared: dict[str, Any] = {
        "configuration": _parse_enum(
            BuildConfiguration,
            data.get("configuration", "development"),
            "configuration",
            source,
        ),
        "optimize_for_size": bool(data.get("optimize_for_size", False)),
    }

    job = Job()
    if "output_dir" in data:
        job.output_dir = Path(data["output_dir"])
    if "compile" in data:
        job.compile_env = _section(
            CompileEnvironment, data["compile"], shared, "compile", source
        )
    if "link" in data:
        job.link_env = _section(LinkEnvironment, data["link"], shared, "link", source)
    return job


def load_job(path: Path | str) -> Job:
    """Load a job description file.

    Raises:
        JobError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise JobError(f"cannot read job file: {e.strerror}", context=str(path)) from e
    except json.JSONDecodeError as e:
        raise JobError(f"invalid JSON: {e}", context=str(path)) from e

    job = parse_job(data, str(path))
    logger.debug("Loaded job %s", path)
    return job
