"""Smoke tests for package metadata.

Validates public attributes exposed via the package API.
"""

from __future__ import annotations

import importlib
from typing import Final

import tensorlag


def test_package_all_exports() -> None:
    """Ensure all expected symbols are exported."""
    expected_metadata: Final[set[str]] = {"__version__", "__license__", "__author__"}
    assert expected_metadata.issubset(set(tensorlag.__all__))

    expected_public_api: Final[set[str]] = {
        # Elements
        "LagrangeElement",
        "Quad4",
        "Hex8",
        "Tesseract16",
        "create_element",
        # 1D building blocks
        "Lagrange1D",
        "NodeSet",
        "NodeVariant",
        "TensorProductIndexer",
        # Geometry
        "ElementBasis",
        "GeometricMap",
        # Errors
        "TensorLagError",
        "DegenerateNodeSetError",
        "DimensionMismatchError",
        "SingularMappingError",
        # Quadrature and node distributions
        "PointsLattice",
        "create_gauss_legendre_lattice",
        "get_chebyshev_1st_kind_nodes_1D",
        "get_chebyshev_2nd_kind_nodes_1D",
        "get_equispaced_nodes_1D",
        "get_gauss_legendre_nodes_1D",
        "get_gauss_legendre_quadrature_1D",
        "get_gauss_lobatto_legendre_nodes_1D",
        # Tolerance
        "get_conservative_tolerance",
        "get_default_tolerance",
        "get_machine_epsilon",
        "get_strict_tolerance",
    }
    assert set(tensorlag.__all__) == expected_metadata | expected_public_api

    for name in tensorlag.__all__:
        assert hasattr(tensorlag, name)


def test_package_metadata_values() -> None:
    """Validate the package metadata constants."""
    assert tensorlag.__version__ == "0.1.0"
    assert tensorlag.__license__ == "MIT"
    assert tensorlag.__author__ == "TensorLag Developers"


def test_metadata_import_stability() -> None:
    """Verify metadata survives module reloads."""
    module = importlib.reload(tensorlag)
    assert module.__version__ == "0.1.0"
