"""Gravity, frame, sink, cooling and viscous source terms."""

from __future__ import annotations

import math
from typing import Callable, Iterator, Optional, Sequence

from disco.cell import Cell, GravMass, InitialData, Mesh, Params, Var

Reducer = Callable[[list[float]], Sequence[float]]


def fgrav(mass: float, r: float, eps: float, n: int) -> float:
    """Magnitude of the softened gravitational acceleration."""
    return mass * r ** (n - 1.0) / (r ** n + eps ** n) ** (1.0 + 1.0 / n)


def rho_sink_rate(
    params: Params,
    p: int,
    dt: float,
    r0: float,
    r1: float,
    m0: float,
    m1: float,
    rho: float,
    pressure: float,
) -> float:
    """Rate at which density is removed near mass ``p`` (0 or 1)."""
    if p not in (0, 1):
        raise ValueError(f"no sink for mass {p}")
    total = m0 + m1
    alpha = params.explicit_viscosity
    one_o_nu = 1.0 / (alpha * pressure / rho) * math.sqrt(
        r0 ** -3 * m0 / total + r1 ** -3 * m1 / total
    )
    # Keep the viscous time from getting short enough to go unstable.
    t_visc0 = max(params.tvisc_fac * 2.0 / 3.0 * r0 * r0 * one_o_nu, 10.0 * dt)
    t_visc1 = max(params.tvisc_fac * 2.0 / 3.0 * r1 * r1 * one_o_nu, 10.0 * dt)
    sink_size = 0.5
    if p == 0:
        return rho / t_visc0 if r0 < sink_size else 0.0
    return rho / t_visc1 if r1 < sink_size else 0.0


def grav_mass_force(
    masses: Sequence[GravMass], params: Params, p: int, r: float, phi: float
) -> tuple[float, float]:
    """Radial and azimuthal acceleration at (r, phi) due to mass ``p``."""
    m = masses[p]
    cosp = math.cos(phi)
    sinp = math.sin(phi)
    dx = r * cosp - m.r * math.cos(m.phi)
    dy = r * sinp - m.r * math.sin(m.phi)
    script_r = math.sqrt(dx * dx + dy * dy)
    cosa = dx / script_r
    sina = dy / script_r
    cosap = cosa * cosp + sina * sinp
    sinap = sina * cosp - cosa * sinp
    f1 = -fgrav(m.mass, script_r, params.g_eps, params.phi_order)
    return cosap * f1, sinap * f1


def _cells(mesh: Mesh) -> Iterator[tuple[int, int, Cell, float, float, float]]:
    """Yield ``(i, k, cell, r, z, dV)`` for every cell."""
    grid = mesh.grid
    for k, plane in enumerate(mesh.cells):
        zm, zp = grid.z_bounds(k)
        dz = zp - zm
        z = 0.5 * (zp + zm)
        for i, ring in enumerate(plane):
            rm, rp = grid.r_bounds(i)
            r = 0.5 * (rp + rm)
            for c in ring:
                yield i, k, c, r, z, c.dphi * 0.5 * (rp * rp - rm * rm) * dz


def _position(m: GravMass) -> tuple[float, float]:
    return m.r * math.cos(m.phi), m.r * math.sin(m.phi)


def add_sources(
    mesh: Mesh,
    masses: Sequence[GravMass],
    dt: float,
    reduce: Optional[Reducer] = None,
) -> None:
    """Add gravity, frame forces, sinks and cooling; record accretion rates on ``masses``."""
    grid = mesh.grid
    p = mesh.params
    mdot = [0.0, 0.0]

    imin = 0 if grid.nghost_min[0] == 1 else grid.nghost_min[0]
    kmin = grid.nghost_min[1]
    imax = grid.n_r - grid.nghost_max[0]
    kmax = grid.n_z - grid.nghost_max[1]

    m0, m1 = masses[0].mass, masses[1].mass
    a = masses[0].r + masses[1].r
    xbh0, ybh0 = _position(masses[0])
    xbh1, ybh1 = _position(masses[1])

    for i, k, c, r, z, dv in _cells(mesh):
        phi = c.tiph - 0.5 * c.dphi
        rho = c.prim[Var.RHO]
        pressure = c.prim[Var.PPP]
        vr = c.prim[Var.URR]
        vz = c.prim[Var.UZZ]
        vp = c.prim[Var.UPP] * r

        xpos = r * math.cos(phi)
        ypos = r * math.sin(phi)
        r0 = math.hypot(xpos - xbh0, ypos - ybh0)
        r1 = math.hypot(xpos - xbh1, ypos - ybh1)

        if p.grav2d:
            sint, cost, gravdist = 1.0, 0.0, r
        else:
            big_r = math.sqrt(r * r + z * z)
            sint, cost, gravdist = r / big_r, z / big_r, big_r

        force_r = 0.0
        force_p = 0.0
        for n in range(p.num_grav_mass):
            fr, fp = grav_mass_force(masses, p, n, gravdist, phi)
            force_r += fr
            force_p += fp

        w_a = p.frame_rom(r, a)
        rdrom_a = p.frame_rdrom(r, a)
        dtom_a = p.frame_dtom(r, a)
        f_centrifugal_r = w_a * w_a / r
        f_euler_phi = -(r * dtom_a + vr * rdrom_a)

        c.cons[Var.SRR] += dt * dv * (rho * vp * vp + pressure) / r
        c.cons[Var.SRR] += dt * dv * rho * (force_r * sint + f_centrifugal_r)
        c.cons[Var.LLL] += dt * dv * rho * (force_p - r * dtom_a) * r
        c.cons[Var.SZZ] += dt * dv * rho * force_r * cost
        c.cons[Var.TAU] += dt * dv * rho * (
            (force_r * sint + f_centrifugal_r) * vr
            + force_r * vz * cost
            + (force_p + f_euler_phi) * vp
        )

        if p.rho_sink_on:
            inside = imin <= i < imax and kmin <= k < kmax
            for n in range(p.grav_mass_type):
                rate = rho_sink_rate(p, n, dt, r0, r1, m0, m1, rho, pressure)
                c.cons[Var.DDD] -= rate * dt * dv
                if inside:
                    mdot[n] += rate * dv

        if p.cooling:
            if p.initial_data == InitialData.SHEAR:
                term = max((pressure - 0.01) / (p.gamma_law - 1.0) * dv / 1.0e-2, 0.0)
                c.cons[Var.TAU] -= term * dt
                c.cool = term / dv
            else:
                cap = c.cons[Var.TAU]
                term = (
                    9.0 / 4.0 * p.explicit_viscosity * p.po_rho_r1 ** -3 / rho
                    * (pressure / rho) ** 4.0 * dt * dv
                )
                term = min(term, cap)
                c.cons[Var.TAU] -= term
                c.cool = term / dt / dv

    reduced = list(reduce(mdot)) if reduce is not None else mdot
    for n in range(p.num_grav_mass):
        masses[n].mdot = reduced[n]


def add_visc_source(mesh: Mesh, masses: Sequence[GravMass], dt: float) -> None:
    """Add viscous heating from the shear of the rotating frame."""
    p = mesh.params
    m0, m1 = masses[0].mass, masses[1].mass
    a = masses[0].r + masses[1].r
    xbh0, ybh0 = _position(masses[0])
    xbh1, ybh1 = _position(masses[1])
    eps2 = p.g_eps * p.g_eps
    alpha = p.explicit_viscosity

    for _, _, c, r, _, dv in _cells(mesh):
        rho = c.prim[Var.RHO]
        pressure = c.prim[Var.PPP]
        phi = c.tiph - 0.5 * c.dphi
        xpos = r * math.cos(phi)
        ypos = r * math.sin(phi)
        d0 = math.hypot(xpos - xbh0, ypos - ybh0)
        d1 = math.hypot(xpos - xbh1, ypos - ybh1)
        rdrom_a = p.frame_rdrom(r, a)
        if p.visc_const:
            sigma_nu = rho * alpha
        else:
            sigma_nu = alpha * pressure / math.sqrt(
                (d0 * d0 + eps2) ** -1.5 * m0 + (d1 * d1 + eps2) ** -1.5 * m1
            )
        c.cons[Var.TAU] += dt * dv * sigma_nu * rdrom_a * (
            rdrom_a + r * c.grad[Var.UPP] + c.gradp[Var.URR]
        )


def add_visc_source_old(mesh: Mesh, dt: float) -> None:
    """Add the simple radial viscous drag term."""
    nu = mesh.params.explicit_viscosity
    for _, _, c, r, _, dv in _cells(mesh):
        rho = c.prim[Var.RHO]
        vr = c.prim[Var.URR]
        c.cons[Var.SRR] += -dt * dv * nu * rho * vr / r / r