#Description: App context wiring the services together with explicit dependencies.

from dataclasses import dataclass

from adapters.kucoin_common import KuCoinBaseAdapter
from utils.config import Settings, settings as default_settings
from services.api import SignalsApi
from services.features import FeatureBuilder
from services.market_data import MarketDataService
from services.monitor import MonitorService
from services.oracle import SignalOracleClient
from services.scheduler import SignalScheduler
from services.signals import SignalService
from services.store import KeyValueTransport, SignalStore

@dataclass
class AppContext:
    market: MarketDataService
    features: FeatureBuilder
    oracle: SignalOracleClient
    store: SignalStore
    signals: SignalService
    monitor: MonitorService
    scheduler: SignalScheduler
    api: SignalsApi

    async def aclose(self):
        self.scheduler.shutdown()
        await self.market.aclose()
        await self.oracle.aclose()
        await self.store.aclose()

def make_transport(cfg: Settings) -> KeyValueTransport:
    backend = cfg.STORE_BACKEND.lower()
    if backend == "memory" or cfg.MODE == "dryrun":
        from adapters.memory_kv import MemoryTransport
        return MemoryTransport()
    if backend == "firebase":
        from adapters.firebase_rtdb import FirebaseTransport
        return FirebaseTransport(cfg.FIREBASE_DB_URL, cfg.FIREBASE_AUTH_TOKEN)
    if backend == "sql":
        from adapters.sql_kv import SqlTransport
        from models.db import make_engine
        return SqlTransport(make_engine(cfg.DATABASE_URL))
    raise ValueError(f"Unknown STORE_BACKEND '{cfg.STORE_BACKEND}'")

def build_app_context(cfg: Settings | None = None, transport: KeyValueTransport | None = None) -> AppContext:
    cfg = cfg or default_settings
    market = MarketDataService(KuCoinBaseAdapter(cfg.KUCOIN_BASE_URL), cfg.KU_SYMBOL)
    features = FeatureBuilder(market, cfg.KU_SYMBOL, cfg.TIMEFRAME, cfg.CANDLE_LIMIT, cfg.CLOSED_CANDLES_ONLY)
    features.update_params({
        "rsi_period": cfg.RSI_PERIOD, "ema_periods": list(cfg.EMA_PERIODS), "bb_period": cfg.BB_PERIOD,
        "bb_mult": cfg.BB_MULT, "stoch_k": cfg.STOCH_K, "stoch_d": cfg.STOCH_D,
    })
    oracle = SignalOracleClient(cfg.ORACLE_URL)
    store = SignalStore(transport or make_transport(cfg), cfg.SYMBOL)
    signals = SignalService(features, oracle, store, market)
    signals.update_params({
        "symbol": cfg.SYMBOL, "timeframe": cfg.TIMEFRAME, "threshold": cfg.THRESHOLD,
        "tp_pct": cfg.TP_PCT, "sl_pct": cfg.SL_PCT, "price_decimals": cfg.PRICE_DECIMALS,
        "dedup_seconds": cfg.ASK_DEDUP_SECONDS,
    })
    monitor = MonitorService(store, market)
    scheduler = SignalScheduler(monitor, cfg.MONITOR_INTERVAL_SECONDS)
    api = SignalsApi(market, features, signals)
    return AppContext(market, features, oracle, store, signals, monitor, scheduler, api)
