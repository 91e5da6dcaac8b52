# SPDX-License-Identifier: MIT
"""Build products declared for a linked binary.

Besides its primary output, a WebAssembly binary has two files the
packaging step must pick up: the module blob and the symbol map.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath

WASM_SUFFIX = ".wasm"
SYMBOLS_SUFFIX = ".symbols"


class BinaryType(Enum):
    EXECUTABLE = "executable"
    DYNAMIC_LIBRARY = "dynamic_library"
    STATIC_LIBRARY = "static_library"


class BuildProductType(Enum):
    EXECUTABLE = "executable"
    DYNAMIC_LIBRARY = "dynamic_library"
    STATIC_LIBRARY = "static_library"
    REQUIRED_RESOURCE = "required_resource"


_PRIMARY_PRODUCT_TYPE: dict[BinaryType, BuildProductType] = {
    BinaryType.EXECUTABLE: BuildProductType.EXECUTABLE,
    BinaryType.DYNAMIC_LIBRARY: BuildProductType.DYNAMIC_LIBRARY,
    BinaryType.STATIC_LIBRARY: BuildProductType.STATIC_LIBRARY,
}


@dataclass(frozen=True)
class Binary:
    """A linked binary: where it goes and what kind it is."""

    output_path: Path
    binary_type: BinaryType = BinaryType.EXECUTABLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_path", Path(self.output_path))


def wasm_path(output_path: PurePath) -> Path:
    """The module blob next to a link output (suffix substitution)."""
    return Path(output_path).with_suffix(WASM_SUFFIX)


def symbols_path(output_path: PurePath) -> Path:
    """The symbol map next to a link output (suffix append)."""
    return Path(f"{output_path}{SYMBOLS_SUFFIX}")


def modify_build_products(
    binary: Binary, build_products: dict[Path, BuildProductType]
) -> None:
    """Add the blob and symbol map for a binary to a product mapping.

    Static libraries are left alone.
    """
    if binary.binary_type is BinaryType.STATIC_LIBRARY:
        return
    build_products[wasm_path(binary.output_path)] = BuildProductType.REQUIRED_RESOURCE
    build_products[symbols_path(binary.output_path)] = (
        BuildProductType.REQUIRED_RESOURCE
    )


def declare_build_products(binary: Binary) -> dict[Path, BuildProductType]:
    """Return every product of a binary, primary output first."""
    products = {binary.output_path: _PRIMARY_PRODUCT_TYPE[binary.binary_type]}
    modify_build_products(binary, products)
    return products
