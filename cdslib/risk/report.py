"""Tabular views of CS01 results."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from cdslib.errors import InvalidArgument
from cdslib.instruments.cds import CDSAnalytic


def bucketed_cs01_frame(
    bucket_cds: Sequence[CDSAnalytic],
    cs01: Sequence[float],
    scale: float = 1.0,
) -> pd.DataFrame:
    """
    Bucketed CS01 with one row per bucket CDS.

    Args:
        bucket_cds: CDSs defining the buckets
        cs01: Sensitivity per bucket, as returned by the calculator
        scale: Multiplier applied to every value, e.g. ``notional * 1e-4``
            to express the sensitivity per basis point of notional

    Returns:
        DataFrame with columns ``maturity``, ``protection_end`` and ``cs01``
        and a final ``total`` column computed as the running sum
    """
    values = np.asarray(cs01, dtype=float)
    if values.ndim != 1 or len(values) != len(bucket_cds):
        raise InvalidArgument(
            f"cs01 must have one value per bucket ({len(values)} != {len(bucket_cds)})"
        )
    cols = ["maturity", "protection_end", "cs01", "total"]
    if len(bucket_cds) == 0:
        return pd.DataFrame(columns=cols)

    df = pd.DataFrame(
        {
            "maturity": [c.maturity for c in bucket_cds],
            "protection_end": [c.protection_end for c in bucket_cds],
            "cs01": values * scale,
        }
    )
    df["total"] = df["cs01"].cumsum()
    return df


def bucketed_cs01_matrix_frame(
    bucket_cds: Sequence[CDSAnalytic],
    cs01: np.ndarray,
    trade_labels: Optional[Sequence[str]] = None,
    scale: float = 1.0,
) -> pd.DataFrame:
    """Trades by buckets CS01 matrix, columns labelled by bucket maturity."""
    matrix = np.asarray(cs01, dtype=float)
    if matrix.ndim != 2 or matrix.shape[1] != len(bucket_cds):
        raise InvalidArgument(f"cs01 must be an (n_trades, {len(bucket_cds)}) matrix")
    if trade_labels is None:
        trade_labels = [f"trade_{i}" for i in range(matrix.shape[0])]
    elif len(trade_labels) != matrix.shape[0]:
        raise InvalidArgument("trade_labels must have one entry per row")
    return pd.DataFrame(
        matrix * scale,
        index=list(trade_labels),
        columns=[c.maturity for c in bucket_cds],
    )
