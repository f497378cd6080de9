from pathlib import Path
from typing import Optional
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from bulwark.exceptions import ConfigError

class AppSettings(BaseSettings):
    name: str = "Bulwark"
    version: str = "1.0.0"

class PathSettings(BaseSettings):
    org_units_path: Path = Path("./config/org_units.yaml")
    access_policy_path: Path = Path("./config/access_policy.yaml")


class AccessSettings(BaseSettings):
    # Routes and menus without a table entry are reachable unless this is switched off.
    default_allow_unmapped: bool = True
    denied_redirect: str = "/dashboard"
    login_redirect: str = "/login"
    path_separator: str = " > "
    strict_tree: bool = True


class SessionGrant(BaseModel):
    role: str
    unit_id: str
    name: Optional[str] = None


class SecuritySettings(BaseSettings):
    """
    Session resolution for the HTTP surface.
    """
    require_session: bool = False
    trust_identity_headers: bool = True  # X-User-Role / X-Unit-Id / X-User-Name
    sessions: dict[str, SessionGrant] = {}  # bearer token -> session grant

class LoggingSettings(BaseSettings):
    log_requests: bool = True
    level: str = "INFO"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__", env_file=".env", extra="ignore")
    app: AppSettings = AppSettings()
    paths: PathSettings = PathSettings()
    access: AccessSettings = AccessSettings()
    security: SecuritySettings = SecuritySettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        # Load from default path if exists
        default_path = Path("config/settings.yaml")
        path = config_path or (default_path if default_path.exists() else None)

        if not path:
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to read settings from {path}: {exc}") from exc

        if not isinstance(config_data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")
        return cls(**config_data)

settings = Settings.load()
