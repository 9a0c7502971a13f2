#Description: Pydantic settings loader with defaults, reading .env.
import os
import pathlib

from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

env_path = pathlib.Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    APP_ENV: str = Field(default="development")
    MODE: str = Field(default=os.getenv("MODE", "paper"))  # paper|dryrun (dryrun keeps signals in memory)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str | None = None

    # Symbol used for the store namespace, and its KuCoin spelling
    SYMBOL: str = Field(default="BTCUSDT")
    KU_SYMBOL: str = Field(default="BTC-USDT")
    TIMEFRAME: str = Field(default="1h")
    CANDLE_LIMIT: int = Field(default=300)
    CLOSED_CANDLES_ONLY: bool = Field(default=True)
    KUCOIN_BASE_URL: str = Field(default="https://api.kucoin.com")

    ORACLE_URL: str = Field(default="https://crisdeyvid-bull-trade.hf.space/signal")
    THRESHOLD: float = Field(default=0.7)
    TP_PCT: float = Field(default=0.01)
    SL_PCT: float = Field(default=0.02)
    DEFAULT_LEVERAGE: int = Field(default=20)
    PRICE_DECIMALS: int = Field(default=2)

    MONITOR_INTERVAL_SECONDS: int = Field(default=60)
    ASK_DEDUP_SECONDS: int = Field(default=0)  # 0 disables the throttle
    HTTP_TIMEOUT_SECONDS: float = Field(default=10.0)

    STORE_BACKEND: str = Field(default="sql")  # sql|firebase|memory
    DATABASE_URL: str = Field(default="sqlite:///./signals.db")
    FIREBASE_DB_URL: str | None = None
    FIREBASE_AUTH_TOKEN: str | None = None

    RSI_PERIOD: int = Field(default=14)
    EMA_PERIODS: list[int] = Field(default=[9, 20, 50, 200])
    BB_PERIOD: int = Field(default=20)
    BB_MULT: float = Field(default=2.0)
    STOCH_K: int = Field(default=14)
    STOCH_D: int = Field(default=3)

    class Config:
        env_file = ".env"
        extra = "allow"

settings = Settings()
