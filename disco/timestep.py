"""CFL time-step limit, including the explicit-viscosity constraint."""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

from disco.cell import GravMass, InitialData, Mesh, Var

Reducer = Callable[[float], float]


def max_signal_speed(
    prim: Sequence[float], w: float, r: float, gamma: float, include_w: bool = True
) -> float:
    """Sound speed plus flow speed, with the azimuthal speed taken relative to ``w``."""
    vp = prim[Var.UPP] * r
    if include_w:
        vp -= w
    vr = prim[Var.URR]
    vz = prim[Var.UZZ]
    cs = math.sqrt(gamma * prim[Var.PPP] / prim[Var.RHO])
    return cs + math.sqrt(vr * vr + vp * vp + vz * vz)


def min_dt(
    mesh: Mesh, masses: Sequence[GravMass], reduce: Optional[Reducer] = None
) -> float:
    """Smallest allowed time step over the non-ghost cells, passed through ``reduce``."""
    grid = mesh.grid
    p = mesh.params
    dt_min = 1.0e100
    for k in range(grid.nghost_min[1], grid.n_z - grid.nghost_max[1]):
        zm, zp = grid.z_bounds(k)
        dz = zp - zm
        for i in range(grid.nghost_min[0], grid.n_r - grid.nghost_max[0]):
            rm, rp = grid.r_bounds(i)
            dr = rp - rm
            r = 0.5 * (rp + rm)
            ring = mesh.cells[k][i]
            for j, c in enumerate(ring):
                w = 0.5 * (c.wiph + ring[j - 1].wiph)
                dx = dr
                rdphi = r * c.dphi
                if rdphi < dr:
                    dx = rdphi
                if dx > dz:
                    dx = dz
                speed = max_signal_speed(c.prim, w, r, p.gamma_law, not p.no_w_in_cfl)
                rho = c.prim[Var.RHO]
                pressure = c.prim[Var.PPP]
                dt = p.cfl * dx / speed
                if p.explicit_viscosity > 0.0:
                    nu = _viscosity(mesh, masses, c.tiph - 0.5 * c.dphi, r, rho, pressure)
                    dt_visc = 0.25 * dx * dx / nu
                    dt = dt / (1.0 + dt / dt_visc)
                dt_min = min(dt_min, dt)
    return reduce(dt_min) if reduce is not None else dt_min


def _viscosity(
    mesh: Mesh, masses: Sequence[GravMass], phi: float, r: float, rho: float, pressure: float
) -> float:
    p = mesh.params
    if p.visc_const:
        return p.explicit_viscosity
    if p.initial_data == InitialData.SHEAR:
        x = r * math.cos(phi)
        if x > 20.0:
            return 1.0e-9
        return p.explicit_viscosity * p.gamma_law * pressure / rho * abs(x) ** 2
    eps2 = p.g_eps * p.g_eps
    d0 = masses[0].dist(r, phi, 0.0)
    d1 = masses[1].dist(r, phi, 0.0)
    omega2 = (d0 * d0 + eps2) ** -1.5 * masses[0].mass + (d1 * d1 + eps2) ** -1.5 * masses[1].mass
    return p.explicit_viscosity * pressure / rho / math.sqrt(omega2)