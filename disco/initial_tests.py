"""Initial data for code tests: viscous shear layer, torus and vortex."""

from __future__ import annotations

import math
import random
from typing import Sequence

from disco.cell import Cell, Domain, GravMass, Mesh, Var


def _radius(mesh: Mesh, i: int) -> float:
    rm, rp = mesh.grid.r_bounds(i)
    return 0.5 * (rm + rp)


_SHEAR_RHO = 1.0
_SHEAR_P = 0.01
_SHEAR_V0 = 1.0
_SHEAR_T0 = 0.25


def _shear_cell(cell: Cell, mesh: Mesh, i: int) -> None:
    params = mesh.params
    r = _radius(mesh, i)
    t = cell.tiph - 0.5 * cell.dphi
    x = r * math.cos(t) - 3.0
    y = r * math.sin(t)
    nu = params.explicit_viscosity if params.explicit_viscosity > 0.0 else 0.05
    vy = 0.0
    if abs(y) < 50.0:
        vy = (
            _SHEAR_V0 / math.sqrt(2.0 * math.pi * nu * _SHEAR_T0)
            * math.exp(-x * x / (4.0 * nu * _SHEAR_T0))
        )
    vr = vy * math.sin(t)
    omega = vy * math.cos(t) / r
    cell.prim[Var.RHO] = _SHEAR_RHO
    cell.prim[Var.PPP] = _SHEAR_P
    cell.prim[Var.URR] = vr
    cell.prim[Var.UPP] = omega - params.frame_rom(r, 1.0) / r
    cell.prim[Var.UZZ] = 0.0
    cell.wiph = 0.0


def single_init_shear(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Gaussian shear layer along x = 3, for one cell."""
    _shear_cell(cell, mesh, i)


def init_shear(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Gaussian shear layer along x = 3, on the whole mesh."""
    for i, _, _, c in mesh.iter_cells():
        _shear_cell(c, mesh, i)


_TORUS_MASS = 1.0
_TORUS_R_INNER = 0.7
_TORUS_R_MAX = 1.0
_TORUS_Q = 2.0


def _torus_profile(mesh: Mesh, i: int, k: int) -> tuple[float, float, float, float]:
    """Return ``(r, rho, pressure, omega)`` of the torus in ring ``i``, layer ``k``."""
    grid = mesh.grid
    gamma = mesh.params.gamma_law
    q = _TORUS_Q
    s = 2.0 * q - q
    gamma_fac = (gamma - 1.0) / gamma
    phi_inner = -1.0 / _TORUS_R_INNER
    phi_max = -1.0 / _TORUS_R_MAX
    rho_norm = (
        gamma_fac * (phi_inner - phi_max + _TORUS_R_INNER ** -s / s - 1.0 ** -s / s)
    ) ** (1.0 / (gamma - 1.0))

    if grid.n_z_global != 1:
        zm, zp = grid.z_bounds(k)
        z = 0.5 * (zm + zp)
    else:
        z = 0.0
    r = _radius(mesh, i)
    big_r = math.sqrt(r * r + z * z)
    potential = -_TORUS_MASS / big_r
    omega = r ** -q
    po_rho = gamma_fac * (phi_inner - potential + _TORUS_R_INNER ** -s / s - r ** -s / s)
    if po_rho < 1.0e-5:
        po_rho = 1.0e-5
    rho = po_rho ** (1.0 / (gamma - 1.0)) / rho_norm
    pressure = po_rho ** (1.0 / gamma_fac) / rho_norm
    return r, rho, pressure, omega


def _set_torus(cell: Cell, r: float, rho: float, pressure: float, omega: float,
               delta: float) -> None:
    cell.prim[Var.RHO] = rho
    cell.prim[Var.PPP] = pressure
    cell.prim[Var.URR] = 0.0
    cell.prim[Var.UPP] = omega * (1.0 + delta) - r ** -2.0
    cell.prim[Var.UZZ] = 0.0
    cell.wiph = r ** -1.0


def single_init_torus(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Pressure-supported torus for one cell, without the random perturbation."""
    r, rho, pressure, omega = _torus_profile(mesh, i, k)
    _set_torus(cell, r, rho, pressure, omega, 0.0)


def init_torus(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Pressure-supported torus with a small random azimuthal perturbation."""
    rng = random.Random(666 + domain.rank)
    for k, plane in enumerate(mesh.cells):
        for i, ring in enumerate(plane):
            r, rho, pressure, omega = _torus_profile(mesh, i, k)
            for c in ring:
                delta = 0.02 * (rng.random() - 0.5)
                _set_torus(c, r, rho, pressure, omega, delta)


_VORTEX_RHO = 1.0
_VORTEX_P0 = 1.0
_VORTEX_R = 1.0
_VORTEX_A = 0.5
_VORTEX_G = 3.0


def _vortex_cell(cell: Cell, mesh: Mesh, i: int) -> None:
    r = _radius(mesh, i)
    if r >= _VORTEX_R:
        return
    big_r, g, a = _VORTEX_R, _VORTEX_G, _VORTEX_A
    t = cell.tiph - 0.5 * cell.dphi
    bump = math.exp(g * (r / big_r - big_r / (big_r - r) + 1.0))
    pressure = _VORTEX_P0 * (1.0 - a * bump)
    vp = math.sqrt(
        a * g * _VORTEX_P0 / _VORTEX_RHO * (2.0 * big_r - r) / big_r * r * r
        / (big_r - r) ** 2.0 * bump
    )
    tracer = 0.0 if math.cos(t) < 0.0 else 1.0
    cell.prim[Var.RHO] = _VORTEX_RHO
    cell.prim[Var.PPP] = pressure
    cell.prim[Var.URR] = 0.0
    cell.prim[Var.UPP] = vp / r
    cell.prim[Var.UZZ] = 0.0
    params = mesh.params
    if params.num_c < params.num_q:
        cell.prim[params.num_c] = tracer


def single_init_vortex(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Isentropic vortex inside unit radius; cells outside are left untouched."""
    _vortex_cell(cell, mesh, i)


def init_vortex(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Isentropic vortex inside unit radius on the whole mesh."""
    for i, _, _, c in mesh.iter_cells():
        _vortex_cell(c, mesh, i)