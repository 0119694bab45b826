"""
Mass balance checks for a solved process network.

For every process with both inbound and outbound connections, the mass of each
conservative aggregate entering the process is compared with the mass leaving
it. Non-conservative constituents (alkalinity, nitrogen species taken one by
one) are not checked.
"""
from typing import Dict, Optional
import logging

import pandas as pd

from wwnet.mass_balance import NetworkResults
from wwnet.model_manager import ModelManager
from wwnet.parameters import ProcessParameter
from wwnet.utils import default_config

logger = logging.getLogger(__name__)

ZERO_THRESHOLD = 1e-10

CONSERVED: Dict[str, ProcessParameter] = {
    'tot_ss': ProcessParameter.SS_TOT,
    'tot_bod': ProcessParameter.BOD_TOT,
    'tot_n': ProcessParameter.N_TOT,
    'tot_p': ProcessParameter.P_TOT,
}


def _total_mass(results: NetworkResults, conn_ids, parameters: ProcessParameter) -> float:
    return sum(results.mass_load(conn_id).aggregate(parameters) for conn_id in conn_ids)


def check_balance(model: ModelManager, results: NetworkResults,
                  aggregates: Optional[Dict[str, ProcessParameter]] = None) -> pd.DataFrame:
    """
    Track the mass balance [kg/d] of every internal process.

    Args:
        model: Solved process network
        results: Results of solve_network on the same model
        aggregates: Name to parameter set, defaults to CONSERVED

    Returns:
        DataFrame with one row per process and aggregate
    """
    aggregates = aggregates if aggregates is not None else CONSERVED
    balance_data = {
        'process': [],
        'name': [],
        'parameter': [],
        'total_inflow': [],
        'total_outflow': [],
        'balance': [],
        'balance_error_percent': []
    }

    for process in model.processes():
        inflow_ids = [conn.id for conn in model.inflows(process.id)]
        outflow_ids = [conn.id for conn in model.outflows(process.id)]
        if not inflow_ids or not outflow_ids:
            continue

        for name, parameters in aggregates.items():
            inflow = _total_mass(results, inflow_ids, parameters)
            outflow = _total_mass(results, outflow_ids, parameters)
            balance = inflow - outflow

            if abs(balance) < ZERO_THRESHOLD:
                error_percent = 0
            else:
                total_magnitude = abs(inflow) + abs(outflow)
                if total_magnitude > ZERO_THRESHOLD:
                    error_percent = (balance / total_magnitude) * 100
                else:
                    error_percent = 0

            balance_data['process'].append(process.id)
            balance_data['name'].append(process.name)
            balance_data['parameter'].append(name)
            balance_data['total_inflow'].append(inflow)
            balance_data['total_outflow'].append(outflow)
            balance_data['balance'].append(balance)
            balance_data['balance_error_percent'].append(error_percent)

    return pd.DataFrame(balance_data)


def plant_balance(model: ModelManager, results: NetworkResults) -> Dict[str, float]:
    """Influent minus discharged mass [kg/d] of each conservative aggregate"""
    influent = [conn.id for process in model.sources() for conn in model.outflows(process.id)]
    discharged = [conn.id for conn in model.connections() if not model.outflows(conn.downstream)]
    return {name: _total_mass(results, influent, parameters) - _total_mass(results, discharged, parameters)
            for name, parameters in CONSERVED.items()}


def alert(balance_df: pd.DataFrame, threshold: Optional[float] = None) -> pd.DataFrame:
    """
    Log the processes whose balance error exceeds the threshold.

    Args:
        balance_df: Output of check_balance
        threshold: Error percent, defaults to balance.tolerance_percent

    Returns:
        The offending rows
    """
    if threshold is None:
        threshold = float(default_config().balance.tolerance_percent)
    errors = balance_df[abs(balance_df['balance_error_percent']) > threshold]
    for parameter in errors['parameter'].unique():
        param_errors = errors[errors['parameter'] == parameter]
        logger.warning("%d balance errors in %s (max error: %.2f%%, processes: %s)",
                       len(param_errors), parameter,
                       param_errors['balance_error_percent'].abs().max(),
                       param_errors['process'].tolist())
    return errors
