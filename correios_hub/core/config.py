# Environment variables and configuration
# pydantic-settings reads process env plus an optional .env in the working dir

from typing import Optional
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # ========= project config =========
    PROJECT_NAME: str = "Correios Hub"


    # ========= Correios credentials =========
    CORREIOS_USERNAME: Optional[str] = Field(None, alias="CORREIOS_USERNAME")
    CORREIOS_PASSWORD: Optional[SecretStr] = Field(None, alias="CORREIOS_PASSWORD")
    CORREIOS_POSTAGE_CARD: Optional[str] = Field(None, alias="CORREIOS_POSTAGE_CARD")   # cartão de postagem
    CORREIOS_PRODUCTION: bool = Field(True, alias="CORREIOS_PRODUCTION")                # False = homologação


    # ========= Correios base config =========
    CORREIOS_BASE_URL_PRODUCTION: str = Field("https://api.correios.com.br", alias="CORREIOS_BASE_URL_PRODUCTION")
    CORREIOS_BASE_URL_STAGING: str = Field("https://apihom.correios.com.br", alias="CORREIOS_BASE_URL_STAGING")
    CORREIOS_CONNECT_TIMEOUT: int = Field(10, ge=1, alias="CORREIOS_CONNECT_TIMEOUT")
    CORREIOS_READ_TIMEOUT: int = Field(30, ge=1, alias="CORREIOS_READ_TIMEOUT")

    # token endpoint returns no expiry, so the lifetime is assumed
    CORREIOS_TOKEN_TTL_SEC: int = Field(3600, ge=60, alias="CORREIOS_TOKEN_TTL_SEC")


    # ========= price / deadline batch config =========
    CORREIOS_BATCH_SIZE: int = Field(5, ge=1, le=5, alias="CORREIOS_BATCH_SIZE")       # upstream hard limit is 5
    CORREIOS_BATCH_ID: str = Field("1", alias="CORREIOS_BATCH_ID")

    CORREIOS_TOKEN_ENDPOINT: str = "/token/v1/autentica/cartaopostagem"
    CORREIOS_PRICE_ENDPOINT: str = "/preco/v1/nacional"
    CORREIOS_DEADLINE_ENDPOINT: str = "/prazo/v1/nacional"


    # ========= pre-postage config =========
    CORREIOS_PREPOSTAGEM_ENDPOINT: str = "/prepostagem/v1/prepostagens"
    CORREIOS_PREPOSTAGEM_BATCH_ENDPOINT: str = "/prepostagem/v1/prepostagens/lista/objetosregistrados"
    CORREIOS_LABEL_ENDPOINT: str = "/prepostagem/v1/prepostagens/rotulo"
    CORREIOS_BATCH_FILE_FIELD: str = "arquivo"
    CORREIOS_REQUESTER_ID: Optional[str] = Field(None, alias="CORREIOS_REQUESTER_ID")    # idCorreiosSolicitanteCancelamento


    def base_url_for(self, production: bool) -> str:
        return self.CORREIOS_BASE_URL_PRODUCTION if production else self.CORREIOS_BASE_URL_STAGING

    @property
    def base_url(self) -> str:
        return self.base_url_for(self.CORREIOS_PRODUCTION)


settings = Settings()  # env only (plus .env)
