"""Measurement of time-averaged diagnostics from the current mesh state."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from disco.cell import Domain, GravMass, Mesh, Var
from disco.diagnostics import Diagnostics

Reducer = Callable[[list[float]], Sequence[float]]
"""Sum a list element-wise over every rank and return the result."""

_EQUATOR_TOL = 0.0000001
_NEAR_RADII = (0.1, 0.2, 0.4)
_PASSIVE_SCALAR = 5


def _identity(values: list[float]) -> list[float]:
    return values


def measure(
    diagnostics: Diagnostics,
    mesh: Mesh,
    t: float,
    masses: Sequence[GravMass],
    domain: Domain,
    directory: Union[str, Path] = ".",
    reduce: Optional[Reducer] = None,
) -> bool:
    """Add a measurement to the running averages if one is due; return whether it was.

    Radial profiles and volume-averaged scalars are weighted by the time since
    the previous measurement, the equatorial table is replaced, and the root
    rank appends accretion figures to ``DiagMdot.dat``.  The global index of
    this patch's first non-ghost ring is taken from ``diagnostics.r_offset``.
    """
    if not t > diagnostics.tdiag_measure:
        return False
    reduce = reduce or _identity
    r_offset = getattr(diagnostics, "r_offset", 0)

    grid = mesh.grid
    params = mesh.params
    num_scal = diagnostics.num_diag
    num_vec = num_scal + 1
    num_eq = num_scal + 2
    n_r_global = len(diagnostics.vector)

    vector = [[0.0] * num_vec for _ in range(n_r_global)]
    scalar = [0.0] * num_scal
    equat = [[0.0] * num_eq for _ in range(diagnostics.n_eq_cells)]
    near = {(p, radius): 0.0 for p in (0, 1) for radius in _NEAR_RADII}
    mass_inside_1 = 0.0

    dtout = t - diagnostics.toutprev
    imin = grid.nghost_min[0]
    imax = grid.n_r - grid.nghost_max[0]
    kmin = grid.nghost_min[1]
    kmax = grid.n_z - grid.nghost_max[1]
    a = masses[0].r + masses[1].r

    position = 0
    for k in range(kmin, kmax):
        zm, zp = grid.z_bounds(k)
        z = 0.5 * (zm + zp)
        dz = zp - zm
        equatorial = abs(zp) < _EQUATOR_TOL or abs(z) < _EQUATOR_TOL
        for i in range(imin, imax):
            rm, rp = grid.r_bounds(i)
            r = 0.5 * (rm + rp)
            ring = mesh.cells[k][i]
            n_p = len(ring)
            row = vector[r_offset + i - imin]
            for c in ring:
                dphi = c.dphi
                phi = c.tiph - 0.5 * dphi
                rho = c.prim[Var.RHO]
                press = c.prim[Var.PPP]
                vr = c.prim[Var.URR]
                vp_minus_w = c.prim[Var.UPP] * r
                vp = vp_minus_w + params.frame_rom(r, a)
                vz = c.prim[Var.UZZ]
                rhoe = press / (params.gamma_law - 1.0)
                ke = 0.5 * rho * (vr * vr + vp * vp + vz * vz)
                e_hydro = rhoe + ke
                dv = 0.5 * (rp * rp - rm * rm) * dphi
                passive = c.prim[_PASSIVE_SCALAR] if len(c.prim) > _PASSIVE_SCALAR else 0.0

                if rp <= 1.0:
                    mass_inside_1 += rho * dv
                for p in (0, 1):
                    dist = masses[p].dist(r, phi, 0.0)
                    for radius in _NEAR_RADII:
                        if dist < radius:
                            near[(p, radius)] += rho * dv

                values = [r, rho, press, vr, vp, vz, vp_minus_w, c.cool,
                          passive, e_hydro, ke, rhoe]
                if equatorial:
                    eq_row = equat[diagnostics.offset_eq + position]
                    eq_row[0] = r
                    eq_row[1] = phi
                    eq_row[2:2 + len(values) - 1] = values[1:]
                    position += 1
                for n, v in enumerate(values):
                    row[n] += v / n_p * dz

    for i in range(imin, imax):
        rm, rp = grid.r_bounds(i)
        row = vector[r_offset + i - imin]
        for n in range(num_scal):
            scalar[n] += row[n + 1] * (rp * rp - rm * rm)

    mass_inner_wedge = 0.0
    if domain.rank == 0:
        rm, rp = grid.r_bounds(0)
        for c in mesh.cells[0][0]:
            mass_inner_wedge += c.prim[Var.RHO] * 0.5 * (rp * rp - rm * rm) * c.dphi

    scalar = list(reduce(scalar))
    flat_vector = list(reduce([v for row in vector for v in row]))
    flat_equat = list(reduce([v for row in equat for v in row]))
    extras = list(reduce([
        *(near[(p, radius)] for radius in _NEAR_RADII for p in (0, 1)),
        mass_inside_1,
        mass_inner_wedge,
    ]))
    near_reduced = {
        (p, radius): extras[2 * n + p]
        for n, radius in enumerate(_NEAR_RADII)
        for p in (0, 1)
    }
    mass_inside_1, mass_inner_wedge = extras[-2], extras[-1]

    height = grid.zmax - grid.zmin
    scalar = [s * dtout / (height * (grid.rmax ** 2 - grid.rmin ** 2)) for s in scalar]

    mdot_near_req1 = math.nan
    r_near_req1 = math.nan
    found = False
    reduced_rows = []
    for i in range(n_r_global):
        row = flat_vector[i * num_vec:(i + 1) * num_vec]
        r = row[0] / height
        if r > 1.0 and not found:
            mdot_near_req1 = row[5] * 2.0 * math.pi * r / height
            r_near_req1 = r
            found = True
        reduced_rows.append([v * dtout / height for v in row])

    if domain.rank == 0:
        fields = [
            t, mdot_near_req1, r_near_req1, mass_inside_1, mass_inner_wedge,
            masses[0].mdot, masses[1].mdot, masses[0].macc, masses[1].macc,
            near_reduced[(0, 0.2)], near_reduced[(1, 0.2)],
            near_reduced[(0, 0.4)], near_reduced[(1, 0.4)],
        ]
        with open(Path(directory) / "DiagMdot.dat", "a") as fh:
            fh.write(" ".join("%e" % v for v in fields) + "\n")

    for acc, row in zip(diagnostics.vector, reduced_rows):
        for n, v in enumerate(row):
            acc[n] += v
    diagnostics.scalar = [s + v for s, v in zip(diagnostics.scalar, scalar)]
    diagnostics.equat = [
        flat_equat[n * num_eq:(n + 1) * num_eq] for n in range(diagnostics.n_eq_cells)
    ]

    diagnostics.toutprev = t
    diagnostics.tdiag_measure += diagnostics.dtdiag_measure
    return True