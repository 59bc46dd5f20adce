from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	APP_NAME: str = Field(default="Engagement Service API")
	APP_VERSION: str = Field(default="1.0.0")
	DEBUG: bool = Field(default=False)
	API_PREFIX: str = Field(default="/api")
	LOG_LEVEL: str = Field(default="INFO")

	# Database
	DATABASE_URL: str = Field(default="")
	DB_POOL_SIZE: int = Field(default=20)
	DB_POOL_TIMEOUT_SECONDS: int = Field(default=2)
	DB_POOL_RECYCLE_SECONDS: int = Field(default=30)

	# CORS, comma separated ("*" allows any origin)
	ALLOWED_ORIGINS: str = Field(default="*")

	# Rate limiting (slowapi limit string, per client address)
	RATE_LIMIT_ENABLED: bool = Field(default=True)
	RATE_LIMIT: str = Field(default="100/15minutes")

	# Engagement analytics
	ANALYTICS_FETCH_LIMIT: int = Field(default=1000)
	DEFAULT_ANALYTICS_DAYS: int = Field(default=30)
	MAX_DURATION_SECONDS: int = Field(default=86400)

	# Azure Monitor / Application Insights
	AZURE_MONITOR_CONN_STR: str = Field(default="")
	ENABLE_APP_INSIGHTS: bool = Field(default=True)
	SAMPLING_RATIO: float = Field(default=1.0)

	@property
	def allowed_origins(self) -> list[str]:
		origins = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]
		return origins or ["*"]


settings = Settings()
