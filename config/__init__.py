import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; development is the default.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_int_list(name: str, default: str) -> list[int]:
    """Comma separated integers, e.g. WORKING_DAYS=1,2,3,4,5."""
    raw = os.getenv(name, default)
    return [int(part) for part in raw.split(",") if part.strip()]


def leave_policy_from_env() -> dict:
    return {
        "sick": int(os.getenv("LEAVE_POLICY_SICK", "12")),
        "casual": int(os.getenv("LEAVE_POLICY_CASUAL", "12")),
        "earned": int(os.getenv("LEAVE_POLICY_EARNED", "15")),
    }


def smtp_from_env() -> dict:
    return {
        "host": os.getenv("SMTP_HOST"),
        "port": int(os.getenv("SMTP_PORT") or 587),
        "user": os.getenv("SMTP_USER"),
        "password": os.getenv("SMTP_PASS"),
        "from_email": os.getenv("FROM_EMAIL") or os.getenv("SMTP_USER"),
        "from_name": os.getenv("FROM_NAME", "HR Operations"),
    }
