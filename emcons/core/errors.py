# SPDX-License-Identifier: MIT
"""Custom exceptions for emcons.

All emcons exceptions inherit from EmconsError, which includes
optional context information (the target, file, or option being
processed) for better error messages.
"""

from __future__ import annotations


class EmconsError(Exception):
    """Base class for all emcons exceptions.

    Attributes:
        message: The error message.
        context: Optional description of what was being processed.
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
    ) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message


class ConfigurationError(EmconsError):
    """Error while setting up the toolchain.

    Raised at toolchain construction, before any action graph exists.
    """


class SdkNotInstalledError(ConfigurationError):
    """The Emscripten SDK could not be found.

    Attributes:
        searched: Locations that were checked, in order.
    """

    def __init__(
        self,
        searched: list[str] | None = None,
        context: str | None = None,
    ) -> None:
        self.searched = list(searched or [])
        message = "Emscripten SDK is not installed; cannot use toolchain"
        if self.searched:
            message += f" (searched: {', '.join(self.searched)})"
        super().__init__(message, context)


class UnsupportedValueError(EmconsError, LookupError):
    """A value has no entry in a fixed mapping.

    Attributes:
        kind: What kind of value was looked up (e.g. 'C++ standard').
        value: The offending value.
    """

    def __init__(
        self,
        kind: str,
        value: object,
        context: str | None = None,
    ) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"unsupported {kind}: {value!r}", context)


class GraphConstructionError(EmconsError):
    """A compile or link environment cannot be turned into actions.

    Raised before any action for the environment is registered.
    """


class JobError(EmconsError):
    """A job description file is malformed."""
