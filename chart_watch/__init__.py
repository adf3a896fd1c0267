"""
Helm chart releases with chart version drift warnings
"""

from .config import Config, get_config
from .exceptions import ChartWatchError, IndexFetchError, IndexParseError, InvalidConstraint
from .freshness import VersionComparison, check_chart_freshness
from .request import ChartRequest, ChartValues, register_values_schema
from .release import declare_chart, helm_chart, label_transformation
from .supervisor import TaskSupervisor, get_supervisor

__all__ = [
    "Config",
    "get_config",
    "ChartWatchError",
    "IndexFetchError",
    "IndexParseError",
    "InvalidConstraint",
    "VersionComparison",
    "check_chart_freshness",
    "ChartRequest",
    "ChartValues",
    "register_values_schema",
    "declare_chart",
    "helm_chart",
    "label_transformation",
    "TaskSupervisor",
    "get_supervisor",
]
