# SPDX-License-Identifier: MIT
"""Emscripten toolchain for HTML5 targets.

Turns compile and link environments into emcc actions:

- one Compile action per source file, producing ``<name>.o`` and, on
  request, a ``<name>.d`` dependency file;
- one Link action per binary, passing all of its arguments through a
  response file and producing the output plus its ``.wasm`` module.

Construction locates the SDK and resolves ToolchainOptions once; every
action built afterwards uses that snapshot and the same environment
overrides.

Relative file paths are resolved against the current directory and
emitted absolute, since actions run in the toolchain's working
directory. Include directories under ``root_dir`` are the exception:
they are emitted relative to the working directory.

Example:
    from emcons.configure.config import LayeredConfig
    from emcons.core.action import ActionGraph
    from emcons.toolchains.emscripten import EmscriptenToolchain

    toolchain = EmscriptenToolchain(config=LayeredConfig.from_files(["h5.json"]))
    graph = ActionGraph()
    objs = toolchain.compile_files(compile_env, Path("Intermediate/Game"), graph)
    toolchain.link_files(link_env, graph)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from emcons.configure.options import DEFAULT_PLATFORM, resolve_toolchain_options
from emcons.configure.sdk import EmscriptenSdk
from emcons.core.action import Action, ActionType
from emcons.core.build_context import (
    BuildConfiguration,
    CompileEnvironment,
    CompileLinkContext,
    LinkEnvironment,
    PrecompiledHeaderAction,
)
from emcons.core.build_products import (
    Binary,
    BuildProductType,
    modify_build_products,
    wasm_path,
)
from emcons.core.errors import GraphConstructionError, SdkNotInstalledError
from emcons.core.response_file import ResponseFile, response_file_path
from emcons.toolchains.emscripten_flags import (
    SEPARATED_ARG_FLAGS,
    EmscriptenFlags,
    describe_optimization,
)
from emcons.toolchains.link_inputs import (
    LinkInput,
    is_third_party_library,
    prepare_link_inputs,
)
from emcons.tools.toolchain import BaseToolchain, CompileOutput, SourceHandler

if TYPE_CHECKING:
    from emcons.configure.config import ConfigStore
    from emcons.configure.platform import Platform
    from emcons.core.action import ActionGraph
    from emcons.core.node import FileNode

logger = logging.getLogger(__name__)

OBJECT_SUFFIX = ".o"
DEPFILE_SUFFIX = ".d"

C_HANDLER = SourceHandler("c", OBJECT_SUFFIX, DEPFILE_SUFFIX)
CXX_HANDLER = SourceHandler("cxx", OBJECT_SUFFIX, DEPFILE_SUFFIX)


class EmscriptenToolchain(BaseToolchain):
    """emcc toolchain producing WebAssembly binaries.

    Attributes:
        sdk: The Emscripten SDK in use.
        options: Toolchain options resolved at construction.
        flags: Flag composer for those options.
        environment: Environment overrides attached to every action.
        working_directory: Directory actions run in.
    """

    def __init__(
        self,
        *,
        sdk: EmscriptenSdk | None = None,
        config: ConfigStore | None = None,
        platform: str = DEFAULT_PLATFORM,
        root_dir: Path | str | None = None,
        working_directory: Path | str | None = None,
        intermediate_dir: Path | str = "Intermediate/HTML5",
        host: Platform | None = None,
        environ: Mapping[str, str] | None = None,
        is_third_party: Callable[[Path], bool] = is_third_party_library,
    ) -> None:
        """Create the toolchain.

        Args:
            sdk: SDK to use; located from the environment when omitted.
            config: Configuration store the options are read from.
            platform: Platform key for platform-specific config layers.
            root_dir: Include directories under this root are emitted
                relative to the working directory.
            working_directory: Directory actions run in (default: cwd).
            intermediate_dir: Scratch directory for Emscripten temp files.
            host: Build host (default: detected).
            environ: Environment to inspect (default: os.environ).
            is_third_party: Rule deciding which libraries link last.

        Raises:
            SdkNotInstalledError: If no installed SDK is available.
        """
        super().__init__("emscripten")

        if sdk is None:
            sdk = EmscriptenSdk.locate(environ=environ)
        elif not sdk.is_installed():
            raise SdkNotInstalledError([str(sdk.root)])

        self.sdk = sdk
        self.options = resolve_toolchain_options(config, platform)
        self.flags = EmscriptenFlags(self.options)
        self.root_dir = Path(root_dir) if root_dir is not None else None
        self.working_directory = (
            Path(working_directory) if working_directory is not None else Path.cwd()
        )
        self.environment = sdk.toolchain_environment(
            intermediate_dir, host=host, environ=environ
        )
        self.is_third_party = is_third_party
        self._report_optimization = True

        options = self.options
        logger.info("EnableMultithreading = %s", options.multithreading)
        logger.info("OffscreenCanvas = %s", options.use_offscreen_canvas)
        logger.info("LLVMWasmBackend = %s", options.llvm_wasm_backend)
        logger.info("EnableTracing = %s", options.tracing)
        logger.info("ProfilerMode = %s", options.profiler_mode.value)
        logger.info("SessionStorageCommandLineKey = %s", options.session_storage_key)
        logger.info("EnableSIMD = %s", options.simd)
        logger.info("3rd party lib path = %s", self.third_party_lib_dir)
        logger.info("Emscripten SDK located in %s", sdk.emscripten_root)
        logger.info(
            "Emscripten config file: %s",
            self.environment.get("EM_CONFIG", "(from EMSDK)"),
        )

    @property
    def third_party_lib_dir(self) -> str:
        """Directory name of prebuilt third-party libraries for this build."""
        return self.sdk.third_party_lib_dir(self.options.multithreading)

    def reset_reporting(self) -> None:
        """Log the optimization choice again on the next composition."""
        self._report_optimization = True

    def _log_optimization(
        self, configuration: BuildConfiguration, optimize_for_size: bool
    ) -> None:
        if self._report_optimization:
            logger.info("%s", describe_optimization(configuration, optimize_for_size))
            self._report_optimization = False

    def get_source_handler(self, suffix: str) -> SourceHandler:
        if suffix.lower() == ".c":
            return C_HANDLER
        return CXX_HANDLER

    def _include_path(self, path: Path) -> str:
        if self.root_dir is not None and path.is_absolute():
            if path.is_relative_to(self.root_dir):
                return os.path.relpath(path, self.working_directory)
        return str(path)

    def _new_action(self, kind: ActionType, description: str) -> Action:
        return Action(
            kind,
            command_path=self.sdk.python(),
            working_directory=self.working_directory,
            command_description=description,
            environment=dict(self.environment),
        )

    def compile_files(
        self, compile_env: CompileEnvironment, output_dir: Path, graph: ActionGraph
    ) -> CompileOutput:
        """Add one Compile action per source file.

        Raises:
            UnsupportedValueError: If the C++ standard has no flag mapping.
        """
        output_dir = Path(output_dir).absolute()
        force_includes = [Path(p).absolute() for p in compile_env.force_include_files]
        shared = self.flags.shared_flags(
            compile_env.configuration,
            compile_env.optimize_for_size,
            use_inlining=compile_env.use_inlining,
            undefined_identifier_warnings=compile_env.undefined_identifier_warnings,
        )
        self._log_optimization(compile_env.configuration, compile_env.optimize_for_size)
        cpp_flags = self.flags.cpp_flags(compile_env.cpp_standard)
        context = CompileLinkContext(
            includes=[self._include_path(p) for p in compile_env.include_paths],
            defines=[*compile_env.definitions, *self.flags.compile_defines()],
            force_includes=[str(p) for p in force_includes],
        )
        per_unit = context.as_tokens()
        remote_ok = (
            compile_env.precompiled_header_action is not PrecompiledHeaderAction.CREATE
            or compile_env.allow_remote_pch
        )

        actions: list[Action] = []
        output = CompileOutput()
        for source in compile_env.source_files:
            source = Path(source).absolute()
            handler = self.get_source_handler(source.suffix)
            if handler.language == "c":
                language_flags = self.flags.c_flags()
            else:
                language_flags = cpp_flags

            action = self._new_action(ActionType.COMPILE, "Compile")
            for header in force_includes:
                action.add_prerequisite(graph.get_item(header))
            action.add_prerequisite(graph.get_item(source))

            obj = graph.get_item(output_dir / f"{source.name}{handler.object_suffix}")
            action.add_produced(obj)

            arguments = [
                str(self.sdk.compiler()),
                *shared,
                *per_unit,
                "-c",
                str(source),
                "-o",
                str(obj),
                *language_flags,
            ]
            if compile_env.generate_dependencies and handler.depfile_suffix:
                depfile = graph.get_item(
                    output_dir / f"{source.name}{handler.depfile_suffix}"
                )
                arguments.extend(["-MD", "-MF", depfile.path.as_posix()])
                action.add_produced(depfile)
                action.dependency_list_file = depfile
            arguments.extend(compile_env.additional_arguments)

            action.arguments = arguments
            action.status_description = source.name
            action.can_execute_remotely = remote_ok
            action.should_output_status_description = True
            actions.append(action)
            output.object_files.append(obj)

        graph.add_actions(actions)
        logger.debug("Added %d compile actions", len(actions))
        return output

    def link_files(self, link_env: LinkEnvironment, graph: ActionGraph) -> FileNode:
        """Add the Link action and its response file.

        Returns:
            The node of the primary link output.

        Raises:
            GraphConstructionError: If the output path is missing, or a
                non-library link has no object files.
        """
        if link_env.output_path is None:
            raise GraphConstructionError("link environment has no output path")
        output_path = link_env.output_path.absolute()
        object_files = [p.absolute() for p in link_env.object_files]
        if not object_files and not link_env.is_building_library:
            raise GraphConstructionError(
                "no object files to link", context=output_path.name
            )

        flags = self.flags.link_flags(link_env)
        self._log_optimization(link_env.configuration, link_env.optimize_for_size)
        action = self._new_action(ActionType.LINK, "Link")
        for obj in object_files:
            action.add_prerequisite(graph.get_item(obj))

        # static libraries are archived without their dependencies
        library_lines: list[str] = []
        if not link_env.is_building_library:
            for link_input in prepare_link_inputs(
                link_env.libraries, self.is_third_party
            ):
                # classified as written, emitted absolute
                link_input = LinkInput(link_input.path.absolute(), link_input.kind)
                action.add_prerequisite(graph.get_item(link_input.path))
                library_lines.append(link_input.response_line())

        output = graph.get_item(output_path)
        action.add_produced(output)
        action.add_produced(graph.get_item(wasm_path(output_path)))

        response = ResponseFile.for_link(
            flags,
            object_files,
            library_lines,
            output_path,
            SEPARATED_ARG_FLAGS,
        )
        response_path = response_file_path(
            link_env.response_dir.absolute(), output_path
        )
        action.add_prerequisite(graph.get_item(response_path))
        action.arguments = [str(self.sdk.compiler()), f"@{response_path}"]
        action.status_description = output_path.name
        action.can_execute_remotely = False

        graph.add_actions([action])
        response.register(graph, response_path)
        return output

    def modify_build_products(
        self, binary: Binary, build_products: dict[Path, BuildProductType]
    ) -> None:
        modify_build_products(binary, build_products)
