from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "user-accounts"
    environment: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    cors_origin: str = "http://localhost:3000"

    mongo_scheme: str = "mongodb+srv"
    mongo_host: str = "localhost"
    mongo_db: str = "user_accounts"
    mongo_password: str | None = None
    mongo_user: str | None = None

    jwt_algorithm: str = "HS256"
    access_token_secret: str = "very-secret-access-key"
    access_token_expires_minutes: int = 60
    refresh_token_secret: str = "very-secret-refresh-key"
    refresh_token_expires_days: int = 10

    model_config = SettingsConfigDict(env_file=(".env",), case_sensitive=True)

    @property
    def mongo_uri(self) -> str:
        auth = ""
        if self.mongo_user and self.mongo_password:
            auth = f"{self.mongo_user}:{self.mongo_password}@"
        params = f"?retryWrites=true&w=majority"
        return f"{self.mongo_scheme}://{auth}{self.mongo_host}/{self.mongo_db}{params}"

    @property
    def cookie_secure(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
