"""
Ion concentration -> nitrogen-equivalent concentration.

Concentrations arrive as mg/l of the ion (NH4+ or NO3-). The nitrogen share of
each ion is the molar-mass ratio N / ion, and mg/l is rescaled to kg/m3
(mg -> kg is 1e-6, l -> m3 is 1e3, net 1e-3) so it can later be multiplied by a
precipitation depth and an area.

Missing handling for the total is controlled by ``MissingPolicy``:

- EXCLUDE (default): a missing ion is left out of the sum; the total is
  missing only when both ions are missing.
- PROPAGATE: the total is missing as soon as either ion is missing.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Union

import numpy as np
import pandas as pd

from .config import ANALYTE_COLS

logger = logging.getLogger(__name__)

# Molar masses (g/mol)
MOLAR_MASS_N = 14.007
MOLAR_MASS_H = 1.008
MOLAR_MASS_O = 15.999
MOLAR_MASS_NH4 = MOLAR_MASS_N + MOLAR_MASS_H * 4   # 18.039
MOLAR_MASS_NO3 = MOLAR_MASS_N + MOLAR_MASS_O * 3   # 62.004

MG_PER_L_TO_KG_PER_M3 = 1e-3

ArrayLike = Union[float, None, np.ndarray, pd.Series]


class Analyte(Enum):
    NH4 = "NH4"
    NO3 = "NO3"

    @property
    def molar_mass(self) -> float:
        return MOLAR_MASS_NH4 if self is Analyte.NH4 else MOLAR_MASS_NO3

    @property
    def nitrogen_fraction(self) -> float:
        return MOLAR_MASS_N / self.molar_mass


class MissingPolicy(Enum):
    EXCLUDE = "exclude"
    PROPAGATE = "propagate"


def _as_float(values: ArrayLike):
    if values is None:
        return np.nan
    if isinstance(values, pd.Series):
        return pd.to_numeric(values, errors="raise").astype(float)
    if np.ndim(values) == 0:
        return float(values)
    return np.asarray(values, dtype=float)


def to_nitrogen(conc: ArrayLike, analyte: Union[Analyte, str]):
    """Ion concentration (mg/l) -> nitrogen concentration (mg/l as N)."""
    analyte = Analyte(analyte)
    return _as_float(conc) * analyte.nitrogen_fraction


def to_kg_per_m3(conc_mg_per_l: ArrayLike):
    """mg/l -> kg/m3."""
    return _as_float(conc_mg_per_l) * MG_PER_L_TO_KG_PER_M3


def nitrogen_concentration(conc: ArrayLike, analyte: Union[Analyte, str]):
    """Ion concentration (mg/l) -> nitrogen concentration in kg/m3."""
    return to_kg_per_m3(to_nitrogen(conc, analyte))


def total_nitrogen_concentration(
    nh4: ArrayLike,
    no3: ArrayLike,
    policy: MissingPolicy = MissingPolicy.EXCLUDE,
):
    """
    Total nitrogen concentration (kg/m3) from NH4 and NO3 ion concentrations (mg/l).

    Args:
        nh4: Ammonium concentration(s), mg/l; NaN/None = missing
        no3: Nitrate concentration(s), mg/l; NaN/None = missing
        policy: How a missing ion affects the sum (see module docstring)

    Returns:
        float for scalar inputs, otherwise an array/Series matching the inputs
    """
    policy = MissingPolicy(policy)
    nh4_n = nitrogen_concentration(nh4, Analyte.NH4)
    no3_n = nitrogen_concentration(no3, Analyte.NO3)

    if policy is MissingPolicy.PROPAGATE:
        return nh4_n + no3_n

    if isinstance(nh4_n, pd.Series) or isinstance(no3_n, pd.Series):
        if not isinstance(nh4_n, pd.Series):
            nh4_n = pd.Series(nh4_n, index=no3_n.index, dtype=float)
        if not isinstance(no3_n, pd.Series):
            no3_n = pd.Series(no3_n, index=nh4_n.index, dtype=float)
        nh4_n, no3_n = nh4_n.align(no3_n)
        total = nh4_n.add(no3_n, fill_value=0.0).where(nh4_n.notna() | no3_n.notna())
        return total.rename("total_N")

    both_missing = np.isnan(nh4_n) & np.isnan(no3_n)
    total = np.nan_to_num(nh4_n, nan=0.0) + np.nan_to_num(no3_n, nan=0.0)
    total = np.where(both_missing, np.nan, total)
    if np.ndim(total) == 0:
        return float(total)
    return total


def add_nitrogen_columns(
    df: pd.DataFrame,
    policy: MissingPolicy = MissingPolicy.EXCLUDE,
) -> pd.DataFrame:
    """
    Add NH4_N, NO3_N and total_N (all kg/m3) to a copy of df.

    Raises:
        KeyError: If an analyte column is absent
    """
    missing = [c for c in ANALYTE_COLS if c not in df.columns]
    if missing:
        raise KeyError(f"Analyte columns not found: {missing}. Available: {list(df.columns)[:20]}...")

    out = df.copy()
    out["NH4_N"] = nitrogen_concentration(out["NH4"], Analyte.NH4)
    out["NO3_N"] = nitrogen_concentration(out["NO3"], Analyte.NO3)
    out["total_N"] = total_nitrogen_concentration(out["NH4"], out["NO3"], policy=policy)

    n_missing = int(out["total_N"].isna().sum())
    logger.info(
        f"Converted {len(out)} records to nitrogen ({policy.value} policy), "
        f"{n_missing} without a total"
    )
    return out
