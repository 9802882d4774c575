"""Initial data for accretion disks around a central binary."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from disco.cell import Cell, Domain, GravMass, Mesh, Params, Var

_SEPARATION = 1.0


def _radius(mesh: Mesh, i: int) -> float:
    rm, rp = mesh.grid.r_bounds(i)
    return 0.5 * (rm + rp)


def _root(x: float) -> float:
    """Square root that yields NaN for negative arguments."""
    return math.sqrt(x) if x >= 0.0 else math.nan


def _set_state(cell: Cell, rho: float, pressure: float, vr: float, upp: float, wiph: float) -> None:
    cell.prim[Var.RHO] = rho
    cell.prim[Var.PPP] = pressure
    cell.prim[Var.URR] = vr
    cell.prim[Var.UPP] = upp
    cell.prim[Var.UZZ] = 0.0
    cell.wiph = wiph


@dataclass(frozen=True)
class _Taper:
    """A power-law disk cut off exponentially inside ``r0``."""

    r0: float
    d: int
    rho_min: float
    p_min: float

    def state(self, params: Params, r: float) -> tuple[float, float, float, float]:
        """Density, pressure, blended angular velocity and r dP/dr / P at ``r``."""
        taper = math.exp(-((r / self.r0) ** -self.d))
        rho = r ** -0.6 * taper
        pressure = params.po_rho_r1 * r ** -1.5 * taper
        r_drp_o_p = -1.5 + self.d * (r / self.r0) ** -self.d
        if rho < self.rho_min:
            rho = self.rho_min
        if pressure < self.p_min:
            pressure = self.p_min
        o2 = 1.0 / r / r / r * (1.0 + 3.0 / 16.0 / r / r) ** 2 + r_drp_o_p * pressure / rho / r / r
        omega = _root(o2)
        idx = params.w_a_milos_index
        a = _SEPARATION
        omega = (r ** idx * omega + a ** (idx - 1.5)) / (r ** idx + a ** idx)
        return rho, pressure, omega, r_drp_o_p


_SSTEST = _Taper(r0=5.0, d=4, rho_min=1.0e-4, p_min=1.0e-7)
_MIDDLE = _Taper(r0=2.5, d=10, rho_min=1.0e-3, p_min=1.0e-6)


def _sstest_cell(cell: Cell, mesh: Mesh, i: int) -> None:
    params = mesh.params
    r = _radius(mesh, i)
    rho, pressure, _, _ = _SSTEST.state(params, r)
    upp = r ** -1.5 - params.frame_rom(r, _SEPARATION) / r
    _set_state(cell, rho, pressure, 0.0, upp, 0.0)


def single_init_sstest(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Tapered Keplerian disk at rest radially, for one cell."""
    _sstest_cell(cell, mesh, i)


def init_sstest(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Tapered Keplerian disk at rest radially, on the whole mesh."""
    for i, _, _, c in mesh.iter_cells():
        _sstest_cell(c, mesh, i)


def _middle_cell(cell: Cell, mesh: Mesh, i: int, still_inside: bool) -> None:
    params = mesh.params
    r = _radius(mesh, i)
    rho, pressure, omega, r_drp_o_p = _MIDDLE.state(params, r)
    alpha = params.explicit_viscosity
    vr = -3.0 * alpha / r / omega * pressure / rho * (2.0 + r_drp_o_p)
    if still_inside and r < 1.0:
        vr = 0.0
    upp = omega - params.frame_rom(r, _SEPARATION) / r
    _set_state(cell, rho, pressure, vr, upp, 0.0)


def single_init_middle(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Viscously spreading tapered disk, for one cell."""
    _middle_cell(cell, mesh, i, still_inside=False)


def init_middle(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Viscously spreading tapered disk, with no inflow inside the binary orbit."""
    for i, _, _, c in mesh.iter_cells():
        _middle_cell(c, mesh, i, still_inside=True)


_MM_RHO0 = 1.0
_MM_RS = 10.0
_MM_DELTA = 3.0
_MM_XI = 2.0
_MM_FAC = 0.0001


def _mm_density(r: float) -> float:
    return _MM_RHO0 * (_MM_RS / r) ** _MM_DELTA * math.exp(-((_MM_RS / r) ** _MM_XI))


def single_init_milos_macfadyen(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Non-rotating isothermal version of the circumbinary disk, for one cell."""
    params = mesh.params
    mach = 1.0 / math.sqrt(params.po_rho_r1)
    r = _radius(mesh, i)
    rho = _mm_density(r)
    po_rho = 1.0 / mach / mach / params.gamma_law
    _set_state(cell, rho, po_rho * rho, 0.0, 0.0, 0.0)


def _binary(mass_ratio: float) -> tuple[float, float, float, float]:
    total = 1.0
    if abs(mass_ratio) > 1.0e-8:
        m0 = total / (1.0 + mass_ratio)
        m1 = total / (1.0 + 1.0 / mass_ratio)
        return m0, m1, m1 / total * _SEPARATION, m0 / total * _SEPARATION
    return 1.0, 0.0, 0.0, 0.0


def _sound_speed(dist: float, mach: float, mass: float) -> float:
    return math.sqrt(1.0 / max(dist, 0.5)) / mach * math.sqrt(mass)


def init_milos_macfadyen(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Circumbinary disk with a central cavity and a binary-heated sound speed."""
    params = mesh.params
    mach = 1.0 / math.sqrt(params.po_rho_r1)
    gamma = params.gamma_law
    cp = 1.0 / mach
    m0, m1, r0, r1 = _binary(params.mass_ratio)
    eps0 = params.g_eps * r0
    eps1 = params.g_eps * r1
    alpha = params.explicit_viscosity
    n = params.phi_order

    for k, plane in enumerate(mesh.cells):
        for i, ring in enumerate(plane):
            r = _radius(mesh, i)
            cs = 1.0 / mach if r < 1.0 else math.sqrt(1.0 / r) / mach
            for c in ring:
                phi = c.tiph - 0.5 * c.dphi
                dist0 = masses[0].dist(r, phi, 0.0)
                dist1 = masses[1].dist(r, phi, 0.0)
                cs0 = _sound_speed(dist0, mach, m0)
                cs1 = _sound_speed(dist1, mach, m1)
                po_rho = (cs0 * cs0 + cs1 * cs1) / gamma

                pot = m0 / (dist0 ** n + eps0 ** n) ** (1.0 / n)
                pot += m1 / (dist1 ** n + eps1 ** n) ** (1.0 / n)

                rho = _mm_density(r)
                omega = 1.0 / r ** 1.5 * (1.0 + 3.0 / 16.0 / r / r)
                o2 = omega * omega + cs * cs / r / r * (2.0 * _MM_RS * _MM_RS / r / r - 3.0)
                if r < 3.0:
                    omega = r ** -1.5
                    vr = 0.0
                else:
                    omega = _root(o2)
                    vr = (
                        -3.0 / math.sqrt(r) * alpha * (1.0 / mach) * (1.0 / mach)
                        * (1.0 - _MM_DELTA + _MM_XI * (r / _MM_RS) ** -_MM_XI)
                    )
                rho = max(rho, 100.0 * params.rho_floor)
                boost = math.exp(_MM_FAC * pot / cp / cp)
                _set_state(c, rho * boost, po_rho * rho * boost, vr, omega - r ** -1.5, 0.0)


_RD_XI = 0.005
_RD_A_O_M = 100.0


def _rad_dom_state(params: Params, r: float) -> tuple[float, float, float, float]:
    alpha = params.explicit_viscosity
    gamma = params.gamma_law
    rho0 = 2.0 / (9.0 * _RD_XI * alpha * gamma) * math.sqrt(_RD_A_O_M)
    p0 = 8.0 * _RD_XI / (9.0 * alpha * gamma) * math.sqrt(_RD_A_O_M)
    rho = rho0 * r ** 1.5
    pressure = p0 * r ** -1.5
    omega = _root(1.0 / r / r / r - 1.5 * pressure / rho / r / r)
    vr = -1.5 * alpha * gamma * (pressure / rho) * math.sqrt(r)
    return rho, pressure, vr, omega - r ** -1.5


def single_init_rad_dom(
    cell: Cell, mesh: Mesh, masses: Sequence[GravMass], i: int, j: int, k: int
) -> None:
    """Radiation-dominated steady alpha disk, for one cell."""
    r = _radius(mesh, i)
    rho, pressure, vr, upp = _rad_dom_state(mesh.params, r)
    _set_state(cell, rho, pressure, vr, upp, r ** -0.5)


def init_rad_dom(mesh: Mesh, masses: Sequence[GravMass], domain: Domain) -> None:
    """Radiation-dominated steady alpha disk, on the whole mesh."""
    for i, _, _, c in mesh.iter_cells():
        r = _radius(mesh, i)
        rho, pressure, vr, upp = _rad_dom_state(mesh.params, r)
        _set_state(c, rho, pressure, vr, upp, r ** -1.5)