from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, case_sensitive=False)

    discord_token: str | None = Field(default=None, validation_alias="DISCORD_TOKEN")
    discord_app_id: int | None = Field(default=None, validation_alias="DISCORD_APP_ID")

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    items_filename: str = Field(default="items.txt", validation_alias="ITEMS_FILENAME")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES")
    min_record_lines: int = Field(default=5, validation_alias="MIN_RECORD_LINES")

    items_per_page: int = Field(default=50, ge=1, validation_alias="ITEMS_PER_PAGE")
    max_matches: int = Field(default=500, ge=1, validation_alias="MAX_MATCHES")
    field_max_length: int = Field(default=1024, ge=64, validation_alias="FIELD_MAX_LENGTH")

    admin_token: str | None = Field(default=None, validation_alias="ADMIN_TOKEN")
    cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @field_validator("discord_token", "admin_token", mode="before")
    @classmethod
    def _empty_str_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v


settings = Settings()
