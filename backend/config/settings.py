import os
import logging
from typing import List, Optional


logger = logging.getLogger(__name__)

class Settings:
    """
    Environment-driven settings for the workflow generator backend.
    Values are read when accessed, so tests can monkeypatch the environment
    before building an app.
    """

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'development')
        self.is_production = self.environment == 'production'

        self.app_name = "n8n workflow generator"
        self.debug = not self.is_production

    # PROMPT STORE
    @property
    def prompts_dir(self) -> str:
        return os.getenv('PROMPTS_DIR', os.path.join('admin_data', 'prompts'))

    # LLM SETTINGS
    @property
    def openrouter_api_key(self) -> Optional[str]:
        return os.getenv('OPENROUTER_API_KEY') or None

    @property
    def openrouter_base_url(self) -> str:
        return os.getenv('OPENROUTER_BASE_URL', 'https://openrouter.ai/api/v1')

    @property
    def validation_model(self) -> str:
        return os.getenv('VALIDATION_MODEL', 'openai/gpt-3.5-turbo')

    @property
    def llm_timeout_seconds(self) -> float:
        return float(os.getenv('LLM_TIMEOUT_SECONDS', '60'))

    # ADMIN AUTH
    @property
    def admin_password(self) -> Optional[str]:
        return os.getenv('ADMIN_PASSWORD') or None

    @property
    def jwt_secret_key(self) -> Optional[str]:
        return os.getenv('JWT_SECRET_KEY') or None

    @property
    def admin_token_expire_hours(self) -> int:
        return int(os.getenv('ADMIN_TOKEN_EXPIRE_HOURS', '12'))

    @property
    def cors_origins(self) -> List[str]:
        raw = os.getenv('CORS_ORIGINS', 'http://localhost:3000')
        return [origin.strip() for origin in raw.split(',') if origin.strip()]
