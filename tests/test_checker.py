import logging

import pandas as pd
import pytest

from wwnet import ModelManager, alert, check_balance, solve_network
from wwnet.components import Clarifier, CompleteMix, Effluent, Influent, Nitrification, Splitter
from wwnet.parameters import ProcessParameter


@pytest.fixture
def solved(raw_load):
    model = ModelManager()
    source = model.create_process('influent', Influent(flow=800.0, load=raw_load))
    mix = model.create_process('mix', CompleteMix())
    aeration = model.create_process('aeration', Nitrification())
    clarifier = model.create_process('clarifier', Clarifier(underflow_fraction=0.25, capture=0.98))
    ras = model.create_process('ras', Splitter([0.9, 0.1]))
    outfall = model.create_process('outfall', Effluent())
    waste = model.create_process('waste', Effluent())

    model.create_connection(source.id, mix.id)
    model.create_connection(mix.id, aeration.id)
    model.create_connection(aeration.id, clarifier.id)
    model.create_connection(clarifier.id, outfall.id)
    model.create_connection(clarifier.id, ras.id)
    model.create_connection(ras.id, mix.id)
    model.create_connection(ras.id, waste.id)
    return model, solve_network(model)


def test_balance_closes(solved):
    model, results = solved
    balance = check_balance(model, results)

    assert list(balance.columns) == ['process', 'name', 'parameter', 'total_inflow', 'total_outflow',
                                     'balance', 'balance_error_percent']
    # influent and sinks are skipped
    assert sorted(balance['name'].unique()) == ['aeration', 'clarifier', 'mix', 'ras']
    assert len(balance) == 4 * 4
    assert balance['balance_error_percent'].abs().max() < 1e-6
    assert alert(balance).empty


def test_custom_aggregates(solved):
    model, results = solved
    balance = check_balance(model, results, {'alk': ProcessParameter.ALK})

    aeration = balance[balance['name'] == 'aeration'].iloc[0]
    assert aeration['balance'] > 0
    assert alert(balance, threshold=1.0)['name'].tolist() == ['aeration']


def test_alert_logs(caplog):
    balance_df = pd.DataFrame({
        'process': [3, 4, 4],
        'name': ['a', 'b', 'b'],
        'parameter': ['tot_ss', 'tot_ss', 'tot_n'],
        'total_inflow': [10.0, 10.0, 10.0],
        'total_outflow': [9.0, 10.0, 10.0],
        'balance': [1.0, 0.0, 0.0],
        'balance_error_percent': [5.26, 0.0, 0.0]
    })

    with caplog.at_level(logging.WARNING, logger='wwnet.checker'):
        errors = alert(balance_df, threshold=1.0)

    assert errors['process'].tolist() == [3]
    assert "1 balance errors in tot_ss" in caplog.text
