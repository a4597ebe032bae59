from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    APP_ENV: str = "dev"
    APP_SECRET: str
    DB_URL: str = "sqlite:///./cafe.db"
    JWT_ISS: str = "cafe"
    JWT_EXP_MIN: int = 7*24*60
    TZ: str = "Asia/Kolkata"  # offer weekdays are judged in the café's local time
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]
    # seed values for the billing settings singleton
    DEFAULT_CGST_RATE: float = 2.5
    DEFAULT_SGST_RATE: float = 2.5
    DEFAULT_TAX_METHOD: str = "onSubtotal"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
