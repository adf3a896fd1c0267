"""
Configuration management for chart release declarations
"""

import pulumi
from typing import Dict, Any, List, Optional

INDEX_ORDERS = ("published", "semver")


class Config:
    """Centralized configuration management for the chart releases"""

    def __init__(self, config: Optional[pulumi.Config] = None):
        self.config = config or pulumi.Config()

        # Chart freshness checks
        check = self.config.get_bool("chart_version_check")
        self.chart_version_check = True if check is None else check
        self.chart_index_order = self.config.get("chart_index_order") or "published"
        if self.chart_index_order not in INDEX_ORDERS:
            raise ValueError(
                f"chart_index_order must be one of {', '.join(INDEX_ORDERS)}, "
                f"got '{self.chart_index_order}'"
            )

        # Kubernetes provider
        self.kube_context = self.config.get("kube_context")

        # Chart releases to declare
        self.charts: List[Dict[str, Any]] = self.config.get_object("charts") or []

        # Additional labels
        self.additional_tags = self.config.get_object("tags") or {}

    @property
    def common_labels(self) -> Dict[str, str]:
        """Get common labels for all releases"""
        base_labels = {
            "managed-by": "pulumi",
            "app.kubernetes.io/part-of": "chart-watch",
        }
        base_labels.update(self.additional_tags)
        return base_labels


def get_config() -> Config:
    """Get the global configuration instance"""
    return Config()
