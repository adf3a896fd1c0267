"""
Chart release declaration
Declares a Helm chart release and schedules an advisory check of the
requested chart version against the repository index.
"""

from typing import Any, Callable, Dict, Optional, TypeVar

import pulumi
import pulumi_kubernetes as k8s

from .config import Config
from .freshness import check_chart_freshness
from .request import ChartRequest
from .supervisor import TaskSupervisor, get_supervisor

T = TypeVar("T")

# (release_name, request, opts) -> declared resource
ChartDeclarer = Callable[[str, ChartRequest, Optional[pulumi.ResourceOptions]], T]


def helm_chart(
    release_name: str,
    request: ChartRequest,
    opts: Optional[pulumi.ResourceOptions] = None,
) -> k8s.helm.v3.Chart:
    """Declare the release as a pulumi_kubernetes Helm chart"""
    fetch_opts = k8s.helm.v3.FetchOpts(repo=request.repo) if request.repo else None
    return k8s.helm.v3.Chart(
        release_name,
        k8s.helm.v3.ChartOpts(
            chart=request.chart,
            version=request.version,
            fetch_opts=fetch_opts,
            namespace=request.namespace,
            values=request.values_tree(),
            api_versions=list(request.api_versions) or None,
            transformations=list(request.transformations) or None,
        ),
        opts,
    )


def declare_chart(
    release_name: str,
    request: ChartRequest,
    declare: Optional[ChartDeclarer] = None,
    opts: Optional[pulumi.ResourceOptions] = None,
    supervisor: Optional[TaskSupervisor] = None,
    config: Optional[Config] = None,
) -> Any:
    """
    Declare a chart release, warning when a newer chart version is published

    Args:
        release_name: Unique release name within the stack
        request: Chart, version, repository and values to deploy
        declare: Callback declaring the release, defaults to helm_chart
        opts: Resource options handed to declare
        supervisor: Runs the freshness check, defaults to the process-wide one
        config: Stack configuration, checks are on when omitted

    Returns:
        Whatever declare returns
    """
    if not release_name:
        raise ValueError("release_name must be a non-empty string")

    check_enabled = config.chart_version_check if config else True
    if check_enabled and request.check_freshness:
        (supervisor or get_supervisor()).submit(
            check_chart_freshness(
                request.chart,
                request.repo,
                request.version,
                order=config.chart_index_order if config else "published",
            ),
            name=f"chart-freshness-{release_name}",
        )

    return (declare or helm_chart)(release_name, request, opts)


def label_transformation(labels: Dict[str, str]) -> Callable[[Any, pulumi.ResourceOptions], None]:
    """Chart transformation adding labels to every rendered object, existing labels win"""

    def add_labels(obj: Any, opts: pulumi.ResourceOptions) -> None:
        if not isinstance(obj, dict) or not isinstance(obj.get("metadata"), dict):
            return
        metadata = obj["metadata"]
        metadata["labels"] = {**labels, **(metadata.get("labels") or {})}

    return add_labels
