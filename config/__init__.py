import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown means development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def parse_seconds(value: str) -> tuple:
    """'15,30,45' -> (15.0, 30.0, 45.0)"""
    return tuple(float(part) for part in value.split(",") if part.strip())
