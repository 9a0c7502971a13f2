#Description: Pure indicator functions over price series; NaN marks cells that are not yet defined.
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

UNDEFINED = float("nan")


@dataclass(frozen=True)
class Stochastic:
    k: pd.Series
    d: pd.Series


@dataclass(frozen=True)
class BollingerBands:
    mid: pd.Series
    high: pd.Series
    low: pd.Series
    width: pd.Series


@dataclass(frozen=True)
class Macd:
    line: pd.Series
    signal: pd.Series
    hist: pd.Series


def _as_series(values: Sequence[float] | pd.Series) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype("float64").reset_index(drop=True)
    return pd.Series(np.asarray(values, dtype="float64"))


def is_undefined(value) -> bool:
    return value is None or not np.isfinite(value)


def ema(series, period: int) -> pd.Series:
    """
    Exponential moving average seeded with the first sample.

    k = 2 / (period + 1); out[0] == series[0], so the output has no warmup gap.
    """
    s = _as_series(series)
    if s.empty:
        return s
    # adjust=False gives y0 = x0, yt = (1 - k) * y(t-1) + k * xt
    return s.ewm(span=period, adjust=False).mean()


def sma(series, period: int) -> pd.Series:
    return _as_series(series).rolling(window=period, min_periods=period).mean()


def rsi(series, period: int = 14) -> pd.Series:
    """
    Wilder RSI. The first average gain/loss are plain means of the first `period`
    deltas; after that avg = (avg * (period - 1) + new) / period.
    An average loss of 0 reads as 100.
    """
    s = _as_series(series)
    n = len(s)
    out = np.full(n, np.nan)
    if n < period + 1:
        return pd.Series(out)

    delta = np.diff(s.to_numpy())
    gains = np.clip(delta, 0, None)
    losses = np.clip(-delta, 0, None)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    out[period] = _rsi_value(avg_gain, avg_loss)
    for i in range(period, len(delta)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        out[i + 1] = _rsi_value(avg_gain, avg_loss)
    return pd.Series(out)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def stochastic(highs, lows, closes, k_period: int = 14, d_period: int = 3) -> Stochastic:
    """
    %K over a trailing k_period window, undefined until the window is full.
    A flat window (highest high == lowest low) reads as 50.
    %D is the SMA of %K on the same index, so d[i] and k[i] share a timestamp.
    """
    h, l, c = _as_series(highs), _as_series(lows), _as_series(closes)
    hh = h.rolling(window=k_period, min_periods=k_period).max()
    ll = l.rolling(window=k_period, min_periods=k_period).min()
    rng = hh - ll
    k = ((c - ll) / rng.where(rng != 0)) * 100.0
    k = k.where(~((rng == 0) & hh.notna()), 50.0)
    d = k.rolling(window=d_period, min_periods=d_period).mean()
    return Stochastic(k=k, d=d)


def bollinger_bands(series, period: int = 20, mult: float = 2.0) -> BollingerBands:
    s = _as_series(series)
    mid = s.rolling(window=period, min_periods=period).mean()
    # population standard deviation
    sd = s.rolling(window=period, min_periods=period).std(ddof=0)
    high = mid + mult * sd
    low = mid - mult * sd
    width = (high - low) / mid.where(mid != 0)
    return BollingerBands(mid=mid, high=high, low=low, width=width)


def percent_change(series, lag: int = 1) -> pd.Series:
    s = _as_series(series)
    return s / s.shift(lag) - 1.0


def macd(series, fast: int = 12, slow: int = 26, signal: int = 9) -> Macd:
    line = ema(series, fast) - ema(series, slow)
    sig = ema(line, signal)
    return Macd(line=line, signal=sig, hist=line - sig)


def zscore(series, period: int = 20) -> pd.Series:
    s = _as_series(series)
    mean = s.rolling(window=period, min_periods=period).mean()
    sd = s.rolling(window=period, min_periods=period).std(ddof=0)
    return (s - mean) / sd.where(sd != 0)
