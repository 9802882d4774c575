import pytest

from disco.cell import Direction, Domain, Grid, Params, create_mesh
from disco.sync import buffer_size, pack_cells, sync_r, sync_z, unpack_cells


def _mesh(n_r=4, n_z=1, nghost=(1, 0)):
    grid = Grid(
        r_faces=[1.0 + 0.5 * i for i in range(n_r + 1)],
        z_faces=[float(k) for k in range(n_z + 1)],
        n_phi=[2] * n_r,
        nghost_min=nghost,
        nghost_max=nghost,
    )
    mesh = create_mesh(grid, Params(), seed=7)
    for i, j, k, c in mesh.iter_cells():
        base = 100.0 * k + 10.0 * i + j
        c.prim = [base + q for q in range(5)]
        c.rk_cons = [-(base + q) for q in range(5)]
    return mesh


def _loopback(calls):
    def exchange(buffer, direction, outward):
        calls.append((direction, outward))
        return list(buffer)

    return exchange


def test_buffer_size_counts_cells():
    mesh = _mesh()
    assert buffer_size(mesh, 0, 2, 0, 1) == 44
    assert buffer_size(mesh, 2, 2, 0, 1) == 0


def test_pack_unpack_round_trip():
    source = _mesh()
    buffer = pack_cells(source, 1, 3, 0, 1)
    assert len(buffer) == buffer_size(source, 1, 3, 0, 1)
    target = _mesh()
    for _, _, _, c in target.iter_cells():
        c.prim = [0.0] * 5
        c.rk_cons = [0.0] * 5
        c.tiph = 0.0
    unpack_cells(target, 1, 3, 0, 1, buffer)
    assert pack_cells(target, 1, 3, 0, 1) == buffer
    assert target.cell(0, 0, 0).prim == [0.0] * 5


def test_unpack_rejects_wrong_length():
    mesh = _mesh()
    with pytest.raises(ValueError):
        unpack_cells(mesh, 0, 1, 0, 1, [0.0])


def test_sync_r_fills_ghosts_from_neighbours():
    mesh = _mesh()
    ring1 = pack_cells(mesh, 1, 2, 0, 1)
    ring2 = pack_cells(mesh, 2, 3, 0, 1)
    calls = []
    sync_r(mesh, Domain(r_inner=False, r_outer=False), _loopback(calls))
    assert pack_cells(mesh, 3, 4, 0, 1) == ring1
    assert pack_cells(mesh, 0, 1, 0, 1) == ring2
    assert calls == [(Direction.R, False), (Direction.R, True)]


def test_sync_r_at_global_boundaries_leaves_ghosts():
    mesh = _mesh()
    before = pack_cells(mesh, 0, 4, 0, 1)
    sent = []

    def exchange(buffer, direction, outward):
        sent.append(list(buffer))
        return [0.0]

    sync_r(mesh, Domain(), exchange)
    assert pack_cells(mesh, 0, 4, 0, 1) == before
    assert sent == [[0.0], [0.0]]


def test_sync_z_skips_single_layer():
    mesh = _mesh()
    calls = []
    sync_z(mesh, Domain(), _loopback(calls))
    assert calls == []


def test_sync_z_fills_layers():
    mesh = _mesh(n_r=2, n_z=4, nghost=(0, 1))
    layer1 = pack_cells(mesh, 0, 2, 1, 2)
    layer2 = pack_cells(mesh, 0, 2, 2, 3)
    calls = []
    sync_z(mesh, Domain(), _loopback(calls))
    assert pack_cells(mesh, 0, 2, 3, 4) == layer1
    assert pack_cells(mesh, 0, 2, 0, 1) == layer2
    assert calls == [(Direction.Z, False), (Direction.Z, True)]