import pytest

from wwnet import Load, ModelManager


@pytest.fixture
def raw_load():
    """Typical raw sewage [mg/L]"""
    return Load.empty().replace(
        vol_ss=150.0, inert_ss=50.0,
        sol_bod=80.0, part_bod=120.0,
        amm_n=25.0, sol_org_n=5.0, part_org_n=10.0, nox=1.0,
        sol_org_p=1.0, part_org_p=2.0, chem_p=0.5, ort_p=4.0,
        alk=250.0, other=3.0,
    )


@pytest.fixture
def model():
    return ModelManager()
