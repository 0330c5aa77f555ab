"""
Dashboard configuration.
"""

from .loader import DashboardConfig, build_dashboard, load_config, load_config_file
from .models import AnalyticsConfig, OutputConfig

__all__ = [
    "AnalyticsConfig",
    "OutputConfig",
    "DashboardConfig",
    "build_dashboard",
    "load_config",
    "load_config_file",
]
