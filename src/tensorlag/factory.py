"""Element factory selecting the closed-form or the tensor-product family."""

from __future__ import annotations

import logging

from .element import LagrangeElement
from .fixed_order import Hex8, Quad4, Tesseract16, _LinearElement
from .node_set import NodeVariant

logger = logging.getLogger(__name__)

_LINEAR_ELEMENTS: dict[int, type[_LinearElement]] = {
    2: Quad4,
    3: Hex8,
    4: Tesseract16,
}


def create_element(
    dim: int,
    order: int,
    variant: NodeVariant = NodeVariant.GAUSS_LOBATTO_LEGENDRE,
) -> LagrangeElement | Quad4 | Hex8 | Tesseract16:
    """Create the element of the given dimension and order.

    Linear elements whose nodes sit on the reference vertices (dim 2 to 4 and
    a node variant including the endpoints) use the closed-form
    Quad4/Hex8/Tesseract16 family; every other combination gets a
    LagrangeElement.

    Note that the closed-form elements number their basis functions by
    vertex; see ``tensor_index_map`` for the relation with the flat tensor
    order of LagrangeElement.

    Args:
        dim (int): Number of reference axes, between 1 and 4.
        order (int): Polynomial degree per axis. Must be at least 1.
        variant (NodeVariant): Node distribution on [-1, 1]. Defaults to
            Gauss-Lobatto-Legendre.

    Returns:
        LagrangeElement | Quad4 | Hex8 | Tesseract16: The element.

    Raises:
        ValueError: If order is less than 1 or dim is not between 1 and 4.
    """
    variant = NodeVariant(variant)
    if order == 1 and dim in _LINEAR_ELEMENTS and variant.includes_endpoints:
        element_type = _LINEAR_ELEMENTS[dim]
        logger.debug(f"create_element(dim={dim}, order=1): using {element_type.__name__}.")
        return element_type()

    logger.debug(
        f"create_element(dim={dim}, order={order}, variant={variant.value}): "
        "using LagrangeElement."
    )
    return LagrangeElement.from_order(dim, order, variant)
