import os


class Config:
    api_base_url = os.getenv("CATALOG_API_BASE_URL", "https://flathub.org/api/v2")
    http_timeout_seconds = float(os.getenv("CATALOG_HTTP_TIMEOUT_SECONDS", "15"))

    # Delay before an in-flight collection refresh mark is dropped again.
    refresh_coalesce_seconds = float(
        os.getenv("CATALOG_REFRESH_COALESCE_SECONDS", "5")
    )

    # Ignore an attached cache channel and always talk to the remote API
    force_remote = os.getenv("CATALOG_FORCE_REMOTE", "false").lower() == "true"

    log_level = os.getenv("CATALOG_LOG_LEVEL", "INFO")

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown configuration key: {key}")
            setattr(self, key, value)

config = Config()
