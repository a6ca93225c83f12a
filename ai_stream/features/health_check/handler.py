from fastapi import Depends
from ai_stream.shared.config import RelayConfig, logger
from ai_stream.shared.dependencies import get_config
from .query import RelayHealth

class HealthCheckHandler:
    def __init__(self, config: RelayConfig = Depends(get_config)):
        self._config = config

    def handle(self) -> RelayHealth:
        api_key = self._config.openai.api_key
        key_configured = api_key is not None and bool(api_key.get_secret_value())
        if not key_configured:
            logger.error("Health check: OPENAI_API_KEY is not configured")

        return RelayHealth(
            status="ok" if key_configured else "error",
            upstream_model=self._config.openai.model,
            services={"openai_api_key": "configured" if key_configured else "missing"},
        )
