"""Utility modules for Alertinator."""
from utils.logger import setup_logging
