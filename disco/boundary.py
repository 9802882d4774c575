"""Outflow and fixed-value boundary conditions in r and z."""

from __future__ import annotations

from typing import Callable, Sequence

from disco.cell import Cell, Direction, Domain, GravMass, Mesh, Var
from disco.reconstruction import Face

SingleInitializer = Callable[[Cell, Mesh, Sequence[GravMass], int, int, int], None]


def _zero(cells: Sequence[Cell]) -> None:
    for c in cells:
        c.prim = [0.0] * len(c.prim)


def _divide(c: Cell, area: float) -> None:
    c.prim = [v / area for v in c.prim]


def _limit_ring(mesh: Mesh, c: Cell, outward: bool) -> None:
    """Apply the diode and Keplerian-boundary switches to a boundary cell."""
    p = mesh.params
    if p.diode:
        vr = c.prim[Var.URR]
        if (outward and vr < 0.0) or (not outward and vr > 0.0):
            c.prim[Var.URR] = 0.0
    if p.kep_boundary:
        c.prim[Var.UPP] = 0.0


def _outflow_r_inner(mesh: Mesh, faces: Sequence[Face], offsets: Sequence[int]) -> None:
    grid = mesh.grid
    p = mesh.params
    r_face = grid.face_pos(0, Direction.R)
    r_face_m1 = grid.face_pos(-1, Direction.R)
    r_face_p1 = grid.face_pos(1, Direction.R)
    r_cell = 0.5 * (r_face + r_face_m1)
    r_cell_r = 0.5 * (r_face + r_face_p1)
    span = (r_face_p1 - r_face_m1) / 2.0

    band = faces[offsets[0]:offsets[1]]
    _zero([f.left for f in band])
    for f in band:
        cl, cr = f.left, f.right
        extrap = [v - p.extrap_bc * g * span for v, g in zip(cr.prim, cr.grad)]
        added = list(cl.prim)
        if p.ss_bcs:
            for q in range(Var.UZZ, len(added)):
                added[q] += extrap[q] * f.area
            added[Var.RHO] += cr.prim[Var.RHO] / r_cell_r ** -0.6 * r_cell ** -0.6 * f.area
            added[Var.PPP] += cr.prim[Var.PPP] / r_cell_r ** -1.5 * r_cell ** -1.5 * f.area
            added[Var.URR] += extrap[Var.URR] * f.area
            added[Var.UPP] += cr.prim[Var.UPP] / r_cell_r ** -1.4 * r_cell ** -1.4 * f.area
        else:
            added = [a + e * f.area for a, e in zip(added, extrap)]
        cl.prim = added

    for k, plane in enumerate(mesh.cells):
        zm, zp = grid.z_bounds(k)
        dz = zp - zm
        for c in plane[0]:
            _divide(c, dz * r_face * c.dphi)
            _limit_ring(mesh, c, outward=False)


def _outflow_r_outer_ring(
    mesh: Mesh, band: Sequence[Face], ring: int, r_face: float
) -> None:
    _zero([f.right for f in band])
    for f in band:
        f.right.prim = [a + b * f.area for a, b in zip(f.right.prim, f.left.prim)]
    for k, plane in enumerate(mesh.cells):
        zm, zp = mesh.grid.z_bounds(k)
        dz = zp - zm
        for c in plane[ring]:
            _divide(c, dz * r_face * c.dphi)
            _limit_ring(mesh, c, outward=True)


def outflow_r(
    mesh: Mesh, faces: Sequence[Face], offsets: Sequence[int], domain: Domain
) -> None:
    """Fill the radial boundary rings by area-weighted copies of their neighbours.

    ``offsets[i]`` is the index in ``faces`` of the first face on the outer side
    of ring ``i``.
    """
    grid = mesh.grid
    n = grid.n_r
    if domain.r_inner and not mesh.params.no_inner_bc:
        _outflow_r_inner(mesh, faces, offsets)
    if domain.r_outer:
        _outflow_r_outer_ring(
            mesh, faces[offsets[n - 3]:offsets[n - 2]], n - 2, grid.face_pos(n - 3, Direction.R)
        )
        _outflow_r_outer_ring(
            mesh, faces[offsets[n - 2]:offsets[n - 1]], n - 1, grid.face_pos(n - 2, Direction.R)
        )


def _reflect_layer(mesh: Mesh, k: int) -> None:
    grid = mesh.grid
    for i, ring in enumerate(mesh.cells[k]):
        rm, rp = grid.r_bounds(i)
        for c in ring:
            _divide(c, 0.5 * (rp * rp - rm * rm) * c.dphi)
            c.prim[Var.UZZ] *= -1.0


def outflow_z(
    mesh: Mesh, faces: Sequence[Face], offsets: Sequence[int], domain: Domain
) -> None:
    """Fill the bottom and top layers from their neighbours with vertical velocity reflected."""
    n = mesh.grid.n_z
    if domain.z_bottom:
        band = faces[0:offsets[1]]
        _zero([f.left for f in band])
        for f in band:
            f.left.prim = [a + b * f.area for a, b in zip(f.left.prim, f.right.prim)]
        _reflect_layer(mesh, 0)
    if domain.z_top:
        band = faces[offsets[n - 2]:offsets[n - 1]]
        _zero([f.right for f in band])
        for f in band:
            f.right.prim = [a + b * f.area for a, b in zip(f.right.prim, f.left.prim)]
        _reflect_layer(mesh, n - 1)


def fixed_r(
    mesh: Mesh,
    masses: Sequence[GravMass],
    domain: Domain,
    initializer: SingleInitializer,
) -> None:
    """Reset the radial ghost rings to the initial data."""
    grid = mesh.grid
    n = grid.n_r
    if not mesh.params.no_inner_bc and domain.r_inner:
        for i in range(grid.nghost_min[0]):
            for k, plane in enumerate(mesh.cells):
                for j, c in enumerate(plane[i]):
                    initializer(c, mesh, masses, i, j, k)
    if domain.r_outer:
        for i in range(n - 1, n - grid.nghost_max[0] - 1, -1):
            for k, plane in enumerate(mesh.cells):
                for j, c in enumerate(plane[i]):
                    initializer(c, mesh, masses, i, j, k)


def fixed_z(
    mesh: Mesh,
    masses: Sequence[GravMass],
    domain: Domain,
    initializer: SingleInitializer,
) -> None:
    """Reset the vertical ghost layers to the initial data."""
    grid = mesh.grid
    n = grid.n_z
    if domain.z_bottom:
        for i in range(grid.n_r):
            for k in range(grid.nghost_min[1]):
                for j, c in enumerate(mesh.cells[k][i]):
                    initializer(c, mesh, masses, i, j, k)
    if domain.z_top:
        for i in range(grid.n_r):
            for k in range(n - 1, n - grid.nghost_max[1] - 1, -1):
                for j, c in enumerate(mesh.cells[k][i]):
                    initializer(c, mesh, masses, i, j, k)