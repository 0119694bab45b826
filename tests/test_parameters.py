import pytest

from wwnet.parameters import ALL_PARAMETERS, NUM_BASE_PARAMETERS, BaseParameter, ProcessParameter


@pytest.mark.parametrize("parameter, expected", [
    (ProcessParameter.SS_VOL, [BaseParameter.VOL_SS]),
    (ProcessParameter.SS_INT, [BaseParameter.INERT_SS]),
    (ProcessParameter.SS_TOT, [BaseParameter.VOL_SS, BaseParameter.INERT_SS]),
    (ProcessParameter.BOD_SOL, [BaseParameter.SOL_BOD]),
    (ProcessParameter.BOD_PRT, [BaseParameter.PART_BOD]),
    (ProcessParameter.BOD_TOT, [BaseParameter.SOL_BOD, BaseParameter.PART_BOD]),
    (ProcessParameter.N_TKN, [BaseParameter.AMM_N, BaseParameter.SOL_ORG_N, BaseParameter.PART_ORG_N]),
    (ProcessParameter.N_TOT, [BaseParameter.AMM_N, BaseParameter.SOL_ORG_N,
                              BaseParameter.PART_ORG_N, BaseParameter.NOX]),
    (ProcessParameter.P_TOT, [BaseParameter.SOL_ORG_P, BaseParameter.PART_ORG_P,
                              BaseParameter.CHEM_P, BaseParameter.ORT_P]),
])
def test_base_parameters(parameter, expected):
    assert parameter.to_base_parameters() == expected


def test_aggregates_are_unions():
    assert ProcessParameter.SS_TOT == ProcessParameter.SS_VOL | ProcessParameter.SS_INT
    assert ProcessParameter.N_TKN == ProcessParameter.N_AMM | ProcessParameter.N_ORG_TOT
    assert ProcessParameter.N_TOT == ProcessParameter.N_TKN | ProcessParameter.N_OXD
    assert ProcessParameter.P_TOT == (ProcessParameter.P_ORG_SOL | ProcessParameter.P_ORG_PRT
                                      | ProcessParameter.P_CHM | ProcessParameter.P_ORT)


def test_particulate_and_soluble_partition():
    assert not ProcessParameter.PARTICULATE & ProcessParameter.SOLUBLE
    assert ProcessParameter.PARTICULATE | ProcessParameter.SOLUBLE | ProcessParameter.OTHER == ALL_PARAMETERS


def test_base_parameter_layout():
    assert NUM_BASE_PARAMETERS == 14
    assert ALL_PARAMETERS.to_base_parameters() == list(BaseParameter)
    assert BaseParameter.VOL_SS.flag == ProcessParameter.SS_VOL
    assert BaseParameter.PART_ORG_P.field_name == 'part_org_p'
    assert ProcessParameter.N_TOT.contains(BaseParameter.NOX)
    assert not ProcessParameter.N_TKN.contains(BaseParameter.NOX)
