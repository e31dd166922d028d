"""Public API surface for TensorLag.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
from . import (
    _basis_multidim,  # noqa: F401
    _basis_utils,  # noqa: F401
    _lagrange_core,  # noqa: F401
)

# Public API imports
from .element import LagrangeElement
from .exceptions import (
    DegenerateNodeSetError,
    DimensionMismatchError,
    SingularMappingError,
    TensorLagError,
)
from .factory import create_element
from .fixed_order import Hex8, Quad4, Tesseract16
from .geometry import ElementBasis, GeometricMap
from .indexer import TensorProductIndexer
from .lagrange_1D import Lagrange1D
from .node_set import NodeSet, NodeVariant
from .quad import (
    PointsLattice,
    create_gauss_legendre_lattice,
    get_chebyshev_1st_kind_nodes_1D,
    get_chebyshev_2nd_kind_nodes_1D,
    get_equispaced_nodes_1D,
    get_gauss_legendre_nodes_1D,
    get_gauss_legendre_quadrature_1D,
    get_gauss_lobatto_legendre_nodes_1D,
)
from .tolerance import (
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
)

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "TensorLag Developers"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "DegenerateNodeSetError",
    "DimensionMismatchError",
    "ElementBasis",
    "GeometricMap",
    "Hex8",
    "Lagrange1D",
    "LagrangeElement",
    "NodeSet",
    "NodeVariant",
    "PointsLattice",
    "Quad4",
    "SingularMappingError",
    "TensorLagError",
    "TensorProductIndexer",
    "Tesseract16",
    "__author__",
    "__license__",
    "__version__",
    "create_element",
    "create_gauss_legendre_lattice",
    "get_chebyshev_1st_kind_nodes_1D",
    "get_chebyshev_2nd_kind_nodes_1D",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_equispaced_nodes_1D",
    "get_gauss_legendre_nodes_1D",
    "get_gauss_legendre_quadrature_1D",
    "get_gauss_lobatto_legendre_nodes_1D",
    "get_machine_epsilon",
    "get_strict_tolerance",
]
