import math

import pytest

from disco.boundary import fixed_r, fixed_z, outflow_r, outflow_z
from disco.cell import Domain, GravMass, Grid, Params, Var, create_mesh
from disco.reconstruction import Face


def _radial_mesh(**kw):
    grid = Grid(r_faces=[1.0, 2.0, 3.0, 4.0], z_faces=[0.0, 1.0], n_phi=[1, 1, 1])
    mesh = create_mesh(grid, Params(**kw))
    for i in range(3):
        mesh.cell(i, 0, 0).prim = [1.0 + i, 0.1 * (i + 1), -0.2, 0.3 + i, 0.05]
    return mesh


def _radial_faces(mesh):
    c0, c1, c2 = (mesh.cell(i, 0, 0) for i in range(3))
    return [
        Face(c0, c1, 0.5, 0.5, 0.0, 2.0 * c0.dphi, 2.0),
        Face(c1, c2, 0.5, 0.5, 0.0, 3.0 * c1.dphi, 3.0),
    ]


def test_outflow_r_outer_copies_interior():
    mesh = _radial_mesh()
    interior = list(mesh.cell(0, 0, 0).prim)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=False, r_outer=True))
    assert mesh.cell(1, 0, 0).prim == pytest.approx(interior)
    assert mesh.cell(2, 0, 0).prim == pytest.approx(interior)
    assert mesh.cell(0, 0, 0).prim == interior


def test_outflow_r_outer_diode_blocks_inflow():
    mesh = _radial_mesh(diode=True)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=False, r_outer=True))
    assert mesh.cell(1, 0, 0).prim[Var.URR] == 0.0
    assert mesh.cell(2, 0, 0).prim[Var.URR] == 0.0


def test_outflow_r_inner_copies_neighbour():
    mesh = _radial_mesh()
    neighbour = list(mesh.cell(1, 0, 0).prim)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=True, r_outer=False))
    assert mesh.cell(0, 0, 0).prim == pytest.approx(neighbour)
    assert mesh.cell(2, 0, 0).prim == [3.0, pytest.approx(0.3), -0.2, 2.3, 0.05]


def test_outflow_r_inner_keplerian_boundary_zeroes_upp():
    mesh = _radial_mesh(kep_boundary=True)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=True, r_outer=False))
    assert mesh.cell(0, 0, 0).prim[Var.UPP] == 0.0
    assert mesh.cell(0, 0, 0).prim[Var.RHO] == pytest.approx(2.0)


def test_outflow_r_inner_skipped_without_inner_bc():
    mesh = _radial_mesh(no_inner_bc=True)
    before = list(mesh.cell(0, 0, 0).prim)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=True, r_outer=False))
    assert mesh.cell(0, 0, 0).prim == before


def test_outflow_r_inner_power_law_profiles():
    mesh = _radial_mesh(ss_bcs=True)
    right = list(mesh.cell(1, 0, 0).prim)
    outflow_r(mesh, _radial_faces(mesh), [0, 1, 2], Domain(r_inner=True, r_outer=False))
    left = mesh.cell(0, 0, 0).prim
    ratio = 1.5 / 2.5
    assert left[Var.RHO] / right[Var.RHO] == pytest.approx(ratio ** -0.6)
    assert left[Var.PPP] / right[Var.PPP] == pytest.approx(ratio ** -1.5)
    assert left[Var.UPP] / right[Var.UPP] == pytest.approx(ratio ** -1.4)
    assert left[Var.URR] == pytest.approx(right[Var.URR])


def _vertical_mesh():
    grid = Grid(r_faces=[1.0, 2.0], z_faces=[0.0, 1.0, 2.0, 3.0], n_phi=[1])
    mesh = create_mesh(grid, Params())
    for k in range(3):
        mesh.cell(0, 0, k).prim = [1.0 + k, 0.5, 0.1, 0.2, 0.4]
    c0, c1, c2 = (mesh.cell(0, 0, k) for k in range(3))
    area = 1.5 * c0.dphi
    faces = [
        Face(c0, c1, 0.5, 0.5, 0.0, area, 1.5),
        Face(c1, c2, 0.5, 0.5, 0.0, area, 1.5),
    ]
    return mesh, faces


def test_outflow_z_reflects_vertical_velocity():
    mesh, faces = _vertical_mesh()
    middle = list(mesh.cell(0, 0, 1).prim)
    outflow_z(mesh, faces, [0, 1, 2], Domain())
    expected = list(middle)
    expected[Var.UZZ] = -middle[Var.UZZ]
    assert mesh.cell(0, 0, 0).prim == pytest.approx(expected)
    assert mesh.cell(0, 0, 2).prim == pytest.approx(expected)
    assert mesh.cell(0, 0, 1).prim == middle


def test_outflow_z_only_bottom():
    mesh, faces = _vertical_mesh()
    top = list(mesh.cell(0, 0, 2).prim)
    outflow_z(mesh, faces, [0, 1, 2], Domain(z_top=False))
    assert mesh.cell(0, 0, 2).prim == top
    assert mesh.cell(0, 0, 0).prim[Var.UZZ] == pytest.approx(-0.4)


def _mark(cell, mesh, masses, i, j, k):
    cell.prim[Var.RHO] = 100.0 + i + 10 * k


def test_fixed_r_sets_ghost_rings():
    grid = Grid(
        r_faces=[1.0, 2.0, 3.0, 4.0, 5.0],
        z_faces=[0.0, 1.0],
        n_phi=[2, 2, 2, 2],
        nghost_min=(1, 0),
        nghost_max=(1, 0),
    )
    mesh = create_mesh(grid, Params())
    masses = [GravMass(1.0, 0.0, 0.0)]
    fixed_r(mesh, masses, Domain(), _mark)
    rho = [[c.prim[Var.RHO] for c in ring] for ring in mesh.cells[0]]
    assert rho[0] == [100.0, 100.0]
    assert rho[3] == [103.0, 103.0]
    assert rho[1] == [0.0, 0.0]
    assert rho[2] == [0.0, 0.0]


def test_fixed_r_respects_domain_and_inner_switch():
    grid = Grid(
        r_faces=[1.0, 2.0, 3.0],
        z_faces=[0.0, 1.0],
        n_phi=[1, 1],
        nghost_min=(1, 0),
        nghost_max=(1, 0),
    )
    mesh = create_mesh(grid, Params(no_inner_bc=True))
    fixed_r(mesh, [], Domain(r_outer=False), _mark)
    assert all(c.prim[Var.RHO] == 0.0 for _, _, _, c in mesh.iter_cells())


def test_fixed_z_sets_ghost_layers():
    grid = Grid(
        r_faces=[1.0, 2.0],
        z_faces=[0.0, 1.0, 2.0, 3.0],
        n_phi=[1],
        nghost_min=(0, 1),
        nghost_max=(0, 1),
    )
    mesh = create_mesh(grid, Params())
    fixed_z(mesh, [], Domain(), _mark)
    rho = [mesh.cell(0, 0, k).prim[Var.RHO] for k in range(3)]
    assert rho == [100.0, 0.0, 120.0]


def test_fixed_z_bottom_only():
    grid = Grid(
        r_faces=[1.0, 2.0],
        z_faces=[0.0, 1.0, 2.0],
        n_phi=[3],
        nghost_min=(0, 1),
        nghost_max=(0, 1),
    )
    mesh = create_mesh(grid, Params())
    fixed_z(mesh, [], Domain(z_top=False), _mark)
    assert [c.prim[Var.RHO] for c in mesh.cells[0][0]] == [100.0] * 3
    assert [c.prim[Var.RHO] for c in mesh.cells[1][0]] == [0.0] * 3
    assert not math.isnan(mesh.cell(0, 0, 1).prim[Var.PPP])