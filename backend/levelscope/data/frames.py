"""
LevelScope — DataFrame Adapters

Convert between pandas OHLCV frames (as most feeds deliver them) and Bar
models. Column names are matched case-insensitively; the time comes from a
"time" or "timestamp" column, or from a DatetimeIndex.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from levelscope.errors import BarSequenceError
from levelscope.models import Bar

_REQUIRED = ("open", "high", "low", "close")
_TIME_COLUMNS = ("time", "timestamp", "datetime", "date")


def bars_from_dataframe(df: pd.DataFrame) -> list[Bar]:
    """Build Bar models from an OHLC(V) DataFrame, in row order."""
    frame = df.rename(columns=lambda c: str(c).lower())

    missing = [c for c in _REQUIRED if c not in frame.columns]
    if missing:
        raise BarSequenceError(f"DataFrame is missing columns: {', '.join(missing)}")

    time_col = next((c for c in _TIME_COLUMNS if c in frame.columns), None)
    if time_col is not None:
        times = pd.to_datetime(frame[time_col])
    elif isinstance(frame.index, pd.DatetimeIndex):
        times = frame.index.to_series()
    else:
        raise BarSequenceError("DataFrame needs a time column or a DatetimeIndex")

    has_volume = "volume" in frame.columns
    bars = []
    for ts, (_, row) in zip(times, frame.iterrows()):
        volume = row["volume"] if has_volume else None
        bars.append(Bar(
            time=pd.Timestamp(ts).to_pydatetime(),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=None if volume is None or pd.isna(volume) else float(volume),
        ))
    return bars


def bars_to_dataframe(bars: Sequence[Bar]) -> pd.DataFrame:
    """Convert bars to a DataFrame indexed by time."""
    data = {
        "time": [b.time for b in bars],
        "open": [b.open for b in bars],
        "high": [b.high for b in bars],
        "low": [b.low for b in bars],
        "close": [b.close for b in bars],
        "volume": [b.volume for b in bars],
    }
    df = pd.DataFrame(data)
    df.set_index("time", inplace=True)
    return df
