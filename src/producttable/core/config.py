# producttable/core/config.py
from dotenv import load_dotenv
load_dotenv(".env")
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field
from typing import Optional, Literal

class Settings(BaseSettings):
    # model_config 会自动加载 .env 文件
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # 应用配置 (会自动转换类型)
    APP_ENV: str = "production"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    APP_VERSION: str = "0.1.0"

    # --- Database ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "producttable"
    DB_PASSWORD: str = "producttable"
    DB_NAME: str = "producttable"
    # 完整连接串, 设置后覆盖上面的分项配置
    DB_URL: Optional[str] = None

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # JWT
    SECRET_KEY: str = Field("change-me", description="HMAC key for access tokens and API key hashing.")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # 编辑者 API Key (SHA-256 十六进制摘要, 见 core.security.get_api_key_hash)
    EDITOR_API_KEY_HASH: Optional[str] = None

    # --- Table rendering ---
    PREVIEW_DEBOUNCE_MS: int = Field(400, ge=0)
    MAX_PAGE_LIMIT: int = Field(100, ge=1)

    # --- Currency format ---
    CURRENCY_CODE: str = "USD"
    CURRENCY_SYMBOL: str = "$"
    CURRENCY_POSITION: Literal["left", "right", "left_space", "right_space"] = "left"
    PRICE_DECIMALS: int = Field(2, ge=0)
    PRICE_THOUSAND_SEPARATOR: str = ","
    PRICE_DECIMAL_SEPARATOR: str = "."

    # --- URL templates ---
    PRODUCT_URL_TEMPLATE: str = "/product/{slug}"
    TERM_URL_TEMPLATE: str = "/{taxonomy}/{slug}"
    PLACEHOLDER_IMAGE_URL: str = "/static/placeholder.png"

settings = Settings()
