import pytest

from wwnet import ModelManager, Solver, solve_network
from wwnet.components import Effluent, Influent, PassThrough
from wwnet.utils import DEFAULT_SETTINGS, default_config, load_config

CONFIG_YAML = """
default:
  solver:
    method: auto
    growth: exact
  balance:
    tolerance_percent: 0.5
ci:
  solver:
    method: lu
"""


def test_default_config():
    config = default_config()
    assert config.solver.method == DEFAULT_SETTINGS['solver']['method']
    assert config.solver.initial_capacity == 8
    assert config.balance.tolerance_percent == 1.0


def test_default_config_overrides():
    config = default_config(solver={'method': 'lu'})
    assert config.solver.method == 'lu'
    assert config.solver.growth == 'doubling'
    assert DEFAULT_SETTINGS['solver']['method'] == 'auto'


def test_load_config_environment(tmp_path):
    (tmp_path / 'config.yaml').write_text(CONFIG_YAML, encoding='utf-8')

    config = load_config(tmp_path, env='ci')

    assert config.solver.method == 'lu'
    assert config.solver.growth == 'exact'
    assert config.solver.zero_flow == pytest.approx(1e-12)
    assert config.balance.tolerance_percent == 0.5
    assert Solver(config).method == 'lu'


def test_load_config_default_environment(tmp_path):
    (tmp_path / 'config.yaml').write_text(CONFIG_YAML, encoding='utf-8')
    config = load_config(tmp_path)
    assert config.solver.method == 'auto'


def test_invalid_growth():
    with pytest.raises(ValueError):
        Solver(default_config(solver={'growth': 'triple'}))


def test_forced_lu_on_acyclic_network(raw_load):
    model = ModelManager()
    source = model.create_process('influent', Influent(flow=3.0, load=raw_load))
    unit = model.create_process('unit', PassThrough())
    model.create_connection(source.id, unit.id)
    outlet = model.create_connection(unit.id, model.create_process('effluent', Effluent()).id)

    results = solve_network(model, default_config(solver={'method': 'lu'}))

    assert results.method == {'hydraulics': 'lu', 'process': 'lu'}
    assert results.load(outlet.id).sol_bod == pytest.approx(raw_load.sol_bod)
