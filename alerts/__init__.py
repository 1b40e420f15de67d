"""Alert system module."""
from alerts.exceptions import (
    AlertinatorError, CheckFailure, StorageError, ChannelDeliveryError, ConfigError,
)
