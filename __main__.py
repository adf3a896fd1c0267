"""
Helm chart releases
Declares the chart releases listed in stack config, warning about chart version drift
"""
import pulumi
import pulumi_kubernetes as k8s
from chart_watch import ChartRequest, declare_chart, get_config, label_transformation

# Configuration
config = get_config()

# Kubernetes provider
k8s_provider = k8s.Provider("kubernetes", context=config.kube_context)

# Chart releases
releases = {}
for entry in config.charts:
    release_name = entry.get("name") or entry.get("chart")
    request = ChartRequest.from_config(
        entry,
        transformations=(label_transformation(config.common_labels),),
    )
    releases[release_name] = declare_chart(
        release_name,
        request,
        opts=pulumi.ResourceOptions(provider=k8s_provider),
        config=config,
    )

# Exports
pulumi.export("releases", list(releases.keys()))
