import pytest

from wwnet import Connection, Load, ModelManager, Process, StructuralFault
from wwnet.components import CompleteMix, Effluent, Influent, Splitter


def test_add_process_twice(model):
    assert model.add_process(Process(1, CompleteMix(), 'mix'))
    assert not model.add_process(Process(1, CompleteMix(), 'other'))
    assert model.num_processes == 1
    assert model.get_process(1).name == 'mix'


def test_add_connection_missing_endpoint(model):
    model.add_process(Process(1, CompleteMix()))
    assert not model.add_connection(Connection(1, 1, 2))
    assert model.num_connections == 0


def test_remove_and_readd_connection(model):
    model.add_process(Process(1, Influent()))
    model.add_process(Process(2, Effluent()))
    assert model.add_connection(Connection(7, 1, 2))
    assert not model.add_connection(Connection(7, 1, 2))

    removed = model.remove_connection(7)
    assert removed == Connection(7, 1, 2)
    assert model.num_connections == 0
    assert model.add_connection(Connection(7, 1, 2))
    assert model.num_connections == 1


def test_create_connection_unknown_endpoint(model):
    mix = model.create_process('mix', CompleteMix())
    with pytest.raises(StructuralFault):
        model.create_connection(mix.id, 99)


def test_identifiers_not_reused(model):
    first = model.create_process('a', CompleteMix())
    model.remove_process(first.id)
    second = model.create_process('b', CompleteMix())
    assert second.id != first.id


def test_remove_referenced_process(model):
    source = model.create_process('influent', Influent())
    sink = model.create_process('effluent', Effluent())
    conn = model.create_connection(source.id, sink.id)

    assert model.remove_process(sink.id) is None
    assert model.get_process(sink.id) is sink
    assert model.get_connection(conn.id) is conn

    assert model.remove_process(sink.id, cascade=True) is sink
    assert model.get_connection(conn.id) is None
    assert model.outflows(source.id) == []


def test_flows_ordered_by_connection_id(model):
    source = model.create_process('influent', Influent())
    split = model.create_process('split', Splitter([0.5, 0.5]))
    a = model.create_process('a', Effluent())
    b = model.create_process('b', Effluent())
    model.create_connection(source.id, split.id)
    second = model.add_connection(Connection(20, split.id, b.id))
    first = model.add_connection(Connection(10, split.id, a.id))
    assert second and first

    assert [conn.id for conn in model.outflows(split.id)] == [10, 20]
    assert [p.id for p in model.sources()] == [source.id]


def test_cycles(model):
    source = model.create_process('influent', Influent())
    mix = model.create_process('mix', CompleteMix())
    split = model.create_process('split', Splitter([0.5, 0.5]))
    sink = model.create_process('effluent', Effluent())
    model.create_connection(source.id, mix.id)
    model.create_connection(mix.id, split.id)
    model.create_connection(split.id, sink.id)
    assert not model.has_cycle()
    assert model.calculation_order() == [source.id, mix.id, split.id, sink.id]

    model.create_connection(split.id, mix.id)
    assert model.has_cycle()
    assert model.find_recycles() == [[mix.id, split.id]]


def test_set_influent(model, raw_load):
    source = model.create_process('influent', Influent())
    mix = model.create_process('mix', CompleteMix())
    model.create_connection(source.id, mix.id)

    model.set_influent(source.id, 250.0, raw_load)
    assert source.impl.flow == 250.0
    assert source.impl.load is raw_load

    with pytest.raises(StructuralFault):
        model.set_influent(mix.id, 1.0, Load.empty())
    with pytest.raises(StructuralFault):
        model.set_influent(42, 1.0, Load.empty())


def test_set_influent_requires_boundary_process():
    model = ModelManager()
    mix = model.create_process('mix', CompleteMix())
    with pytest.raises(StructuralFault):
        model.set_influent(mix.id, 1.0, Load.empty())
