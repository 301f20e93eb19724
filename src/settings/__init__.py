from settings.config import CONFIG_FILENAME, ConfigError, DiagnosticConfig, load_config

__all__ = ["CONFIG_FILENAME", "ConfigError", "DiagnosticConfig", "load_config"]
