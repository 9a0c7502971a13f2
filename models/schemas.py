#Description: Pydantic schemas representing candles, oracle decisions and signals for cross-layer transport.

from pydantic import BaseModel, Field
from typing import Any, Dict, Literal, Optional

FeatureVector = Dict[str, float]

class Candle(BaseModel):
    ts: int  # ms epoch, candle open time
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

class FeatureSnapshot(BaseModel):
    features: FeatureVector
    last_price: float
    candle_ts: int

class OracleDecision(BaseModel):
    signal: Literal["CALL", "PUT", "NO-TRADE"]
    probability: Optional[float] = None
    tp_pct: Optional[float] = None
    sl_pct: Optional[float] = None
    threshold: Optional[float] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def tradeable(self) -> bool:
        return self.signal != "NO-TRADE"

class Signal(BaseModel):
    symbol: str
    timeframe: str
    side: Literal["CALL", "PUT"]
    probability: float
    threshold: float
    entry_price: float
    tp_price: float
    sl_price: float
    tp_pct: float
    sl_pct: float
    leverage: int
    status: Literal["OPEN", "CLOSED"] = "OPEN"
    time_open: str
    time_close: Optional[str] = None
    exit_price: Optional[float] = None
    reason: Optional[Literal["TP", "SL"]] = None
    last_price: float
    features: FeatureVector = Field(default_factory=dict)
    source: str = ""

    def to_record(self) -> dict:
        # unset optionals are left out so the stored node matches what was written
        return self.model_dump(exclude_none=True)
