from typing import Dict

from warden.configuration.config import settings

REGISTRY_NAME: str = "CoinGecko"
BASE_URL: str = settings.COINGECKO_BASE_URL.rstrip("/")
COINS_LIST_ENDPOINT: str = f"{BASE_URL}/coins/list"
COIN_DETAIL_ENDPOINT: str = f"{BASE_URL}/coins"
HTTP_TIMEOUT_SECONDS: float = float(settings.REGISTRY_HTTP_TIMEOUT_SECONDS)
MAX_DETAIL_CANDIDATES: int = max(1, int(settings.COINGECKO_MAX_CANDIDATES))
ETHEREUM_PLATFORM_KEY: str = "ethereum"

# Only `platforms` is needed from the detail endpoint
COIN_DETAIL_MINIMAL_PARAMS: Dict[str, str] = {
    "localization": "false",
    "tickers": "false",
    "market_data": "false",
    "community_data": "false",
    "developer_data": "false",
}
