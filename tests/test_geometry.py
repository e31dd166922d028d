"""Tests for the isoparametric GeometricMap."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import numpy.typing as npt
import pytest

from tensorlag.element import LagrangeElement
from tensorlag.exceptions import DimensionMismatchError, SingularMappingError
from tensorlag.fixed_order import Hex8, Quad4, Tesseract16
from tensorlag.geometry import ElementBasis, GeometricMap
from tensorlag.node_set import NodeVariant
from tensorlag.quad import create_gauss_legendre_lattice
from tensorlag.tolerance import get_conservative_tolerance, get_default_tolerance

TOL = get_default_tolerance(np.float64)
LOOSE_TOL = get_conservative_tolerance(np.float64)


def _affine_matrix(dim: int, rng: np.random.Generator) -> npt.NDArray[np.float64]:
    """Well conditioned random matrix with positive determinant."""
    return np.eye(dim) * 2.0 + 0.3 * rng.uniform(-1.0, 1.0, size=(dim, dim))


def _curved_vertices(
    element: LagrangeElement, rng: np.random.Generator
) -> npt.NDArray[np.float64]:
    """Vertices of a mildly curved, valid element."""
    ref = element.reference_nodes()
    return 1.5 * ref + 0.05 * rng.uniform(-1.0, 1.0, size=ref.shape)


class TestAffineMapping:
    """An affine vertex layout gives a constant Jacobian."""

    @pytest.mark.parametrize("dim", [1, 2, 3, 4])
    def test_lagrange_element(self, dim: int, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(dim, 2)
        A = _affine_matrix(dim, rng)
        b = rng.uniform(-1.0, 1.0, size=dim)
        vertices = element.reference_nodes() @ A.T + b

        pts = rng.uniform(-1.0, 1.0, size=(3, dim))
        nptest.assert_allclose(element.physical_position(pts, vertices), pts @ A.T + b, atol=TOL)
        nptest.assert_allclose(
            element.jacobian(pts, vertices), np.broadcast_to(A, (3, dim, dim)), atol=TOL
        )
        nptest.assert_allclose(element.det_jacobian(pts, vertices), np.linalg.det(A), rtol=TOL)
        nptest.assert_allclose(
            element.inv_jacobian(pts, vertices),
            np.broadcast_to(np.linalg.inv(A), (3, dim, dim)),
            atol=TOL,
        )

    @pytest.mark.parametrize("element_type", [Quad4, Hex8, Tesseract16])
    def test_fixed_order_elements(
        self, element_type: type[Quad4 | Hex8 | Tesseract16], rng: np.random.Generator
    ) -> None:
        element = element_type()
        dim = element.dim
        A = _affine_matrix(dim, rng)
        vertices = element.reference_vertices @ A.T
        pt = rng.uniform(-1.0, 1.0, size=dim)
        nptest.assert_allclose(element.physical_position(pt, vertices), A @ pt, atol=TOL)
        nptest.assert_allclose(element.jacobian(pt, vertices), A, atol=TOL)
        nptest.assert_allclose(element.det_jacobian(pt, vertices), np.linalg.det(A), rtol=TOL)
        nptest.assert_allclose(element.inv_jacobian(pt, vertices), np.linalg.inv(A), atol=TOL)


class TestCurvedMapping:
    """Jacobian consistency on curved geometry."""

    @pytest.mark.parametrize("dim", [1, 2, 3, 4])
    def test_inverse_round_trip(self, dim: int, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(dim, 2, NodeVariant.EQUISPACED)
        vertices = _curved_vertices(element, rng)
        pts = rng.uniform(-1.0, 1.0, size=(4, dim))
        J = element.jacobian(pts, vertices)
        J_inv = element.inv_jacobian(pts, vertices)
        nptest.assert_allclose(J @ J_inv, np.broadcast_to(np.eye(dim), J.shape), atol=TOL)
        nptest.assert_allclose(J_inv @ J, np.broadcast_to(np.eye(dim), J.shape), atol=TOL)

    @pytest.mark.parametrize("dim", [1, 2, 3, 4])
    def test_determinant_matches_numpy(self, dim: int, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(dim, 3)
        vertices = _curved_vertices(element, rng)
        pts = rng.uniform(-1.0, 1.0, size=(4, dim))
        J = element.jacobian(pts, vertices)
        nptest.assert_allclose(element.det_jacobian(pts, vertices), np.linalg.det(J), rtol=TOL)

    def test_jacobian_by_complex_step(self, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(3, 2)
        vertices = _curved_vertices(element, rng)
        pt = rng.uniform(-1.0, 1.0, size=3)
        h = 1e-30
        J = element.jacobian(pt, vertices)
        for b in range(3):
            shifted = pt.astype(np.complex128)
            shifted[b] += 1j * h
            column = element.physical_position(shifted, vertices).imag / h
            nptest.assert_allclose(column, J[:, b], atol=LOOSE_TOL)

    def test_single_point_shapes(self) -> None:
        element = LagrangeElement.from_order(2, 1)
        vertices = element.reference_nodes()
        pt = [0.2, 0.1]
        assert element.physical_position(pt, vertices).shape == (2,)
        assert element.jacobian(pt, vertices).shape == (2, 2)
        assert element.det_jacobian(pt, vertices).shape == ()
        assert element.inv_jacobian(pt, vertices).shape == (2, 2)


class TestQuadratureLoop:
    """Integrating det J over the reference element gives the physical measure."""

    def test_trapezoid_area(self) -> None:
        element = Quad4()
        vertices = np.array([[0.0, 0.0], [2.0, 0.0], [1.5, 1.0], [0.5, 1.0]])
        lattice, weights = create_gauss_legendre_lattice((2, 2))
        dets = element.det_jacobian(lattice.get_all_points(), vertices)
        nptest.assert_allclose(np.sum(weights * dets), 1.5, rtol=TOL)

    def test_curved_quadrilateral_area_matches_lagrange(self, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(2, 2)
        vertices = _curved_vertices(element, rng)
        lattice, weights = create_gauss_legendre_lattice((6, 6))
        pts = lattice.get_all_points()
        area = np.sum(weights * element.det_jacobian(pts, vertices))

        # Same integral with a finer rule
        fine_lattice, fine_weights = create_gauss_legendre_lattice((10, 10))
        fine_area = np.sum(
            fine_weights * element.det_jacobian(fine_lattice.get_all_points(), vertices)
        )
        nptest.assert_allclose(area, fine_area, rtol=TOL)

    def test_hexahedron_volume(self, rng: np.random.Generator) -> None:
        element = Hex8()
        A = _affine_matrix(3, rng)
        vertices = element.reference_vertices @ A.T
        lattice, weights = create_gauss_legendre_lattice((2, 2, 2))
        volume = np.sum(weights * element.det_jacobian(lattice.get_all_points(), vertices))
        nptest.assert_allclose(volume, 8.0 * np.linalg.det(A), rtol=TOL)


class TestSingularMapping:
    """Degenerate geometry is reported, never turned into inf/NaN."""

    # Vertex 3 collapsed onto vertex 0: the edge xi = -1 has zero length.
    COLLAPSED_QUAD = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]])

    def test_det_returned_without_check(self) -> None:
        element = Quad4()
        det = element.det_jacobian([-1.0, 0.3], self.COLLAPSED_QUAD)
        assert det == 0.0

    def test_det_with_check_raises(self) -> None:
        element = Quad4()
        with pytest.raises(SingularMappingError) as exc_info:
            element.det_jacobian([-1.0, 0.3], self.COLLAPSED_QUAD, check=True)
        assert exc_info.value.point_index is None
        assert exc_info.value.det == 0.0

    def test_inverse_raises_with_point_index(self) -> None:
        element = Quad4()
        pts = np.array([[0.0, 0.0], [0.5, -0.5], [-1.0, 0.3]])
        with pytest.raises(SingularMappingError, match="at point 2") as exc_info:
            element.inv_jacobian(pts, self.COLLAPSED_QUAD)
        assert exc_info.value.point_index == 2  # noqa: PLR2004
        # Regular points are unaffected
        inv = element.inv_jacobian(pts[:2], self.COLLAPSED_QUAD)
        assert np.all(np.isfinite(inv))

    def test_flat_element_raises(self) -> None:
        element = LagrangeElement.from_order(2, 1)
        # All vertices on the line y = 2 x
        t = np.array([0.0, 1.0, 0.3, 2.0])
        vertices = np.stack([t, 2.0 * t], axis=1)
        with pytest.raises(SingularMappingError):
            element.inv_jacobian([0.1, 0.2], vertices)

    @pytest.mark.parametrize("dim", [2, 3, 4])
    def test_tiny_elements_are_not_singular(self, dim: int, rng: np.random.Generator) -> None:
        element = LagrangeElement.from_order(dim, 1)
        A = 1e-9 * _affine_matrix(dim, rng)
        vertices = element.reference_nodes() @ A.T
        pt = np.zeros(dim)
        nptest.assert_allclose(element.inv_jacobian(pt, vertices) @ A, np.eye(dim), atol=TOL)
        det = element.det_jacobian(pt, vertices, check=True)
        nptest.assert_allclose(det, np.linalg.det(A), rtol=TOL)

    def test_tesseract_singular(self) -> None:
        element = Tesseract16()
        vertices = element.reference_vertices.copy()
        vertices[:, 3] = 0.0
        with pytest.raises(SingularMappingError):
            element.inv_jacobian(np.zeros(4), vertices)

    def test_custom_tolerance(self) -> None:
        element = LagrangeElement.from_order(2, 1)
        A = np.array([[1.0, 1.0], [0.0, 0.1]])
        vertices = element.reference_nodes() @ A.T
        GeometricMap(element).inv_jacobian([0.0, 0.0], vertices)
        with pytest.raises(SingularMappingError):
            GeometricMap(element, tol=0.5).inv_jacobian([0.0, 0.0], vertices)

    def test_negative_tolerance_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            GeometricMap(Quad4(), tol=-1.0)


class TestValidation:
    """Vertex validation and capability protocol."""

    def test_wrong_vertex_shape_raises(self) -> None:
        element = Quad4()
        with pytest.raises(DimensionMismatchError, match=r"\(4, 2\)"):
            element.jacobian([0.0, 0.0], np.zeros((3, 2)))
        with pytest.raises(DimensionMismatchError):
            element.physical_position([0.0, 0.0], np.zeros((4, 3)))

    def test_non_finite_vertices_raise(self) -> None:
        element = LagrangeElement.from_order(2, 1)
        vertices = element.reference_nodes().copy()
        vertices[1, 0] = np.nan
        with pytest.raises(ValueError, match="finite"):
            element.jacobian([0.0, 0.0], vertices)

    def test_both_families_provide_element_basis(self) -> None:
        assert isinstance(LagrangeElement.from_order(3, 2), ElementBasis)
        for element_type in (Quad4, Hex8, Tesseract16):
            assert isinstance(element_type(), ElementBasis)

    def test_geometric_map_properties(self) -> None:
        element = Hex8()
        geometric_map = GeometricMap(element)
        assert geometric_map.element is element
        assert geometric_map.dim == 3  # noqa: PLR2004
        assert element.geometric_map.element is element
