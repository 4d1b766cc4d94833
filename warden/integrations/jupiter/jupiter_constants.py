from warden.configuration.config import settings

REGISTRY_NAME: str = "Jupiter"
REGISTRY_DISPLAY_NAME: str = "Jupiter strict token list"
STRICT_LIST_ENDPOINT: str = settings.JUPITER_STRICT_LIST_URL
HTTP_TIMEOUT_SECONDS: float = float(settings.REGISTRY_HTTP_TIMEOUT_SECONDS)
