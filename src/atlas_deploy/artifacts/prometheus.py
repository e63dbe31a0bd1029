"""Renderizador da configuração de scrape do Prometheus."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import yaml

from atlas_deploy.core.config.schema import ConfigTree


EXPORTER_SCRAPE_INTERVAL = "30s"
APP_JOB = "icepaca-app"

# (job, alvo) dos exporters auxiliares
_EXPORTER_JOBS: Tuple[Tuple[str, str], ...] = (
    ("nginx", "nginx:9113"),
    ("mongodb", "mongodb-exporter:9216"),
    ("redis", "redis-exporter:9121"),
    ("node", "node-exporter:9100"),
)


def prometheus_document(config: ConfigTree) -> Dict[str, Any]:
    interval = f"{config.monitoring.metrics.scrape_interval}s"

    jobs: List[Dict[str, Any]] = [
        {
            "job_name": APP_JOB,
            "static_configs": [{"targets": ["app:3000"]}],
            "metrics_path": "/metrics",
            "scrape_interval": interval,
        }
    ]
    for job, target in _EXPORTER_JOBS:
        jobs.append(
            {
                "job_name": job,
                "static_configs": [{"targets": [target]}],
                "scrape_interval": EXPORTER_SCRAPE_INTERVAL,
            }
        )

    return {
        "global": {"scrape_interval": interval, "evaluation_interval": interval},
        "rule_files": ["/etc/prometheus/rules/*.yml"],
        "alerting": {
            "alertmanagers": [{"static_configs": [{"targets": ["alertmanager:9093"]}]}]
        },
        "scrape_configs": jobs,
    }


def render_prometheus_config(config: ConfigTree) -> str:
    return yaml.safe_dump(prometheus_document(config), sort_keys=False, default_flow_style=False)
