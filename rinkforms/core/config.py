from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "rink-forms"
    LOG_LEVEL: str = "INFO"

    ADMIN_JWT_TTL_MINUTES: int = 240
    ADMIN_JWT_SECRET: str = "change_me_admin"

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8081"

    DATABASE_URL: str

    # Roles allowed to edit form configurations and the template library.
    EDITOR_ROLES: str = "ADMIN,MANAGER"
    # Roles allowed to fill data-entry forms.
    ENTRY_ROLES: str = "ADMIN,MANAGER,STAFF"
    DEFAULT_AUTHOR: str = "Unknown"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def editor_roles_list(self) -> List[str]:
        return [r.strip().upper() for r in self.EDITOR_ROLES.split(",") if r.strip()]

    @property
    def entry_roles_list(self) -> List[str]:
        return [r.strip().upper() for r in self.ENTRY_ROLES.split(",") if r.strip()]

settings = Settings()
