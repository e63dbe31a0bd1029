"""
Renderizador do manifest de orquestração (Kubernetes, multi-documento YAML).

Documentos emitidos, nesta ordem:
- Deployment (sempre)
- Service (sempre)
- HorizontalPodAutoscaler (somente com escala horizontal habilitada)
- Ingress com TLS (somente com TLS habilitado)

Réplicas, recursos, intervalos de health check e estratégia de rollout vêm
literalmente da configuração. Mesma árvore => mesmo texto, byte a byte.
"""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from atlas_deploy.core.config.schema import ConfigTree

from .model import Recreate, RollingUpdate, RolloutStrategy, rollout_for


APP_PORT = 3000
SERVICE_PORT = 80


def _rollout_spec(strategy: RolloutStrategy) -> Dict[str, Any]:
    if isinstance(strategy, RollingUpdate):
        return {
            "type": "RollingUpdate",
            "rollingUpdate": {
                "maxUnavailable": strategy.max_unavailable,
                "maxSurge": strategy.max_surge,
            },
        }
    if isinstance(strategy, Recreate):
        return {"type": "Recreate"}
    raise TypeError(f"unknown rollout strategy: {strategy!r}")


def _deployment(config: ConfigTree) -> Dict[str, Any]:
    name = config.environment.name
    resources = config.deployment.scaling.vertical.resources
    health = config.monitoring.health_checks

    container = {
        "name": name,
        "image": f"{name}:latest",
        "ports": [{"containerPort": APP_PORT}],
        "env": [
            {"name": "NODE_ENV", "value": "production"},
            {"name": "DOMAIN", "value": config.environment.domain},
            {"name": "CDN_URL", "value": config.environment.cdn_url},
        ],
        "resources": {
            "requests": {"cpu": resources.requests.cpu, "memory": resources.requests.memory},
            "limits": {"cpu": resources.limits.cpu, "memory": resources.limits.memory},
        },
        "livenessProbe": {
            "httpGet": {"path": "/health", "port": APP_PORT},
            "initialDelaySeconds": 30,
            "periodSeconds": health.interval,
            "timeoutSeconds": health.timeout,
        },
        "readinessProbe": {
            "httpGet": {"path": "/health", "port": APP_PORT},
            "initialDelaySeconds": 15,
            "periodSeconds": 10,
        },
    }

    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "labels": {"app": name, "environment": "production"},
        },
        "spec": {
            "replicas": config.deployment.scaling.horizontal.min_replicas,
            "strategy": _rollout_spec(rollout_for(config.deployment.strategy)),
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": {"app": name}},
                "spec": {"containers": [container]},
            },
        },
    }


def _service(config: ConfigTree) -> Dict[str, Any]:
    name = config.environment.name
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": f"{name}-service", "labels": {"app": name}},
        "spec": {
            "selector": {"app": name},
            "ports": [{"port": SERVICE_PORT, "targetPort": APP_PORT, "protocol": "TCP"}],
            "type": "ClusterIP",
        },
    }


def _autoscaler(config: ConfigTree) -> Dict[str, Any]:
    name = config.environment.name
    horizontal = config.deployment.scaling.horizontal
    return {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": {"name": f"{name}-hpa"},
        "spec": {
            "scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": name},
            "minReplicas": horizontal.min_replicas,
            "maxReplicas": horizontal.max_replicas,
            "metrics": [
                {
                    "type": "Resource",
                    "resource": {
                        "name": "cpu",
                        "target": {
                            "type": "Utilization",
                            "averageUtilization": horizontal.target_cpu_utilization,
                        },
                    },
                }
            ],
        },
    }


def _ingress(config: ConfigTree) -> Dict[str, Any]:
    name = config.environment.name
    domain = config.environment.domain
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {
            "name": f"{name}-ingress",
            "annotations": {
                "kubernetes.io/ingress.class": "nginx",
                "cert-manager.io/cluster-issuer": "letsencrypt-prod",
                "nginx.ingress.kubernetes.io/ssl-redirect": "true",
                "nginx.ingress.kubernetes.io/force-ssl-redirect": "true",
            },
        },
        "spec": {
            "tls": [{"hosts": [domain], "secretName": f"{name}-tls"}],
            "rules": [
                {
                    "host": domain,
                    "http": {
                        "paths": [
                            {
                                "path": "/",
                                "pathType": "Prefix",
                                "backend": {
                                    "service": {
                                        "name": f"{name}-service",
                                        "port": {"number": SERVICE_PORT},
                                    }
                                },
                            }
                        ]
                    },
                }
            ],
        },
    }


def kubernetes_documents(config: ConfigTree) -> List[Dict[str, Any]]:
    """Documentos do manifest, na ordem canônica de emissão."""
    docs = [_deployment(config), _service(config)]
    if config.deployment.scaling.horizontal.enabled:
        docs.append(_autoscaler(config))
    if config.security.ssl.enabled:
        docs.append(_ingress(config))
    return docs


def render_kubernetes_manifest(config: ConfigTree) -> str:
    """Renderiza o manifest completo como YAML multi-documento separado por `---`."""
    parts = [
        yaml.safe_dump(doc, sort_keys=False, default_flow_style=False)
        for doc in kubernetes_documents(config)
    ]
    return "---\n".join(parts)
