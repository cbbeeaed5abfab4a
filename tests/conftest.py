import numpy as np
import pytest

from fluidized_bed_heat_transfer.bubbling_bed.dry_air import DryAir, DryAirTable


def make_table():
    """Small linear dry-air table, roughly realistic between 250 K and 1500 K."""
    T = np.linspace(250.0, 1500.0, 6)
    rho = 1e5/(287.12*T)
    c_p = 1000.0 + 0.15*(T - 250.0)
    eta = 1.6e-5 + 2.9e-8*(T - 250.0)
    lam = 0.022 + 6.0e-5*(T - 250.0)
    return DryAirTable(
        T=T,
        rho=rho,
        h=1000.0*(T - 273.15),
        s=1000.0*np.log(T/273.15),
        c_p=c_p,
        c_v=c_p - 287.12,
        beta=1/T,
        w_s=np.sqrt(1.4*287.12*T),
        lam=lam,
        eta=eta,
        ny=eta/rho,
        a=lam/(rho*c_p),
        Pr=np.full(T.shape, 0.71),
    )


@pytest.fixture
def table():
    return make_table()


@pytest.fixture
def air(table):
    return DryAir(table)
