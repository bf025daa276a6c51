
import os
from dataclasses import dataclass


def _env_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    PORT: int = int(os.getenv("PORT", "5002"))

    # persistence (memory backend when MONGODB_URI is empty)
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DB: str = os.getenv("MONGODB_DB", "altrion")

    # loan policy (percent values)
    LOAN_LTV_PERCENT: float = float(os.getenv("LOAN_LTV_PERCENT", "60"))
    LOAN_INTEREST_RATE: float = float(os.getenv("LOAN_INTEREST_RATE", "5.2"))
    LOAN_TERM_MONTHS: int = int(os.getenv("LOAN_TERM_MONTHS", "12"))
    STRICT_STATUS_TRANSITIONS: bool = _env_bool("STRICT_STATUS_TRANSITIONS")

    # platform linking
    PLATFORM_API_BASE: str = os.getenv("PLATFORM_API_BASE", "")
    CONNECT_TIMEOUT_SECONDS: float = float(os.getenv("CONNECT_TIMEOUT_SECONDS", "10"))
    CONNECT_SUCCESS_RATE: float = float(os.getenv("CONNECT_SUCCESS_RATE", "0.9"))

    # pricing
    PRICE_REFRESH: bool = _env_bool("PRICE_REFRESH")
    COINGECKO_IDS: str = os.getenv("COINGECKO_IDS", "BTC:bitcoin,ETH:ethereum,USDC:usd-coin")

settings = Settings()
