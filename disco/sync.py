"""Ghost-zone exchange between neighbouring patches of a decomposed domain."""

from __future__ import annotations

from itertools import islice
from typing import Callable, Iterator, Sequence

from disco.cell import Cell, Direction, Domain, Mesh

Exchange = Callable[[list[float], Direction, bool], Sequence[float]]
"""Send a buffer to the outward (True) or inward (False) neighbour along a
direction and return the buffer received from the neighbour on the other side."""


def _cells_in(mesh: Mesh, imin: int, imax: int, kmin: int, kmax: int) -> Iterator[Cell]:
    for plane in mesh.cells[kmin:kmax]:
        for ring in plane[imin:imax]:
            yield from ring


def buffer_size(mesh: Mesh, imin: int, imax: int, kmin: int, kmax: int) -> int:
    """Number of values needed to pack the given block of rings."""
    count = sum(1 for _ in _cells_in(mesh, imin, imax, kmin, kmax))
    return count * (2 * mesh.params.num_q + 1)


def pack_cells(mesh: Mesh, imin: int, imax: int, kmin: int, kmax: int) -> list[float]:
    """Primitives, stored conserved values and face angle of each cell, in order."""
    buffer: list[float] = []
    for c in _cells_in(mesh, imin, imax, kmin, kmax):
        buffer.extend(c.prim)
        buffer.extend(c.rk_cons)
        buffer.append(c.tiph)
    return buffer


def unpack_cells(
    mesh: Mesh, imin: int, imax: int, kmin: int, kmax: int, buffer: Sequence[float]
) -> None:
    """Fill the given block of rings from a buffer written by ``pack_cells``."""
    expected = buffer_size(mesh, imin, imax, kmin, kmax)
    if len(buffer) != expected:
        raise ValueError(f"buffer holds {len(buffer)} values, expected {expected}")
    nq = mesh.params.num_q
    values = iter(buffer)
    for c in _cells_in(mesh, imin, imax, kmin, kmax):
        c.prim = list(islice(values, nq))
        c.rk_cons = list(islice(values, nq))
        c.tiph = next(values)


def sync_r(mesh: Mesh, domain: Domain, exchange: Exchange) -> None:
    """Exchange radial ghost rings with the inner and outer neighbours."""
    grid = mesh.grid
    n = grid.n_r
    gmin, gmax = grid.nghost_min[0], grid.nghost_max[0]
    nz = grid.n_z

    if domain.r_outer:
        hi_send = [0.0]
    else:
        hi_send = pack_cells(mesh, n - 2 * gmax, n - gmax, 0, nz)
    if domain.r_inner:
        low_send = [0.0]
    else:
        low_send = pack_cells(mesh, gmin, 2 * gmin, 0, nz)

    hi_recv = exchange(low_send, Direction.R, False)
    low_recv = exchange(hi_send, Direction.R, True)

    if not domain.r_outer:
        unpack_cells(mesh, n - gmax, n, 0, nz, hi_recv)
    if not domain.r_inner:
        unpack_cells(mesh, 0, gmin, 0, nz, low_recv)


def sync_z(mesh: Mesh, domain: Domain, exchange: Exchange) -> None:
    """Exchange vertical ghost layers when the global grid has more than one layer."""
    grid = mesh.grid
    if grid.n_z_global <= 1:
        return
    n = grid.n_z
    gmin, gmax = grid.nghost_min[1], grid.nghost_max[1]
    nr = grid.n_r

    hi_send = pack_cells(mesh, 0, nr, n - 2 * gmax, n - gmax)
    low_send = pack_cells(mesh, 0, nr, gmin, 2 * gmin)

    hi_recv = exchange(low_send, Direction.Z, False)
    low_recv = exchange(hi_send, Direction.Z, True)

    unpack_cells(mesh, 0, nr, n - gmax, n, hi_recv)
    unpack_cells(mesh, 0, nr, 0, gmin, low_recv)