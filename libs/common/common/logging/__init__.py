from .setup_logging import setup_logging
from .std_logging_config import StdLoggingConfig, common_logger_config

__all__ = ["StdLoggingConfig", "common_logger_config", "setup_logging"]
