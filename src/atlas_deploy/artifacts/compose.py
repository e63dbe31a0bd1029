"""
Renderizador do descritor docker-compose.

Serviços:
- app         (sempre; retry fixo: 3 tentativas, 5s de intervalo)
- redis       (cache habilitado)
- mongodb     (sempre)
- nginx       (TLS habilitado)
- prometheus + grafana (métricas habilitadas)

Volumes nomeados acompanham exatamente os serviços incluídos.
"""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from atlas_deploy.core.config.schema import ConfigTree


COMPOSE_VERSION = "3.8"
RESTART_MAX_ATTEMPTS = 3
RESTART_DELAY = "5s"
MONGO_DATABASE = "icepaca"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _app(config: ConfigTree, network: str) -> Dict[str, Any]:
    env = config.environment
    resources = config.deployment.scaling.vertical.resources
    health = config.monitoring.health_checks

    depends_on: List[str] = []
    if config.performance.caching.redis.enabled:
        depends_on.append("redis")
    depends_on.append("mongodb")

    return {
        "image": f"${{IMAGE_NAME:-{env.name}}}:${{IMAGE_TAG:-latest}}",
        "container_name": env.name,
        "restart": "unless-stopped",
        "environment": [
            "NODE_ENV=production",
            f"DOMAIN={env.domain}",
            f"CDN_URL={env.cdn_url}",
            f"API_URL={env.api_url}",
            f"REDIS_ENABLED={_flag(config.performance.caching.redis.enabled)}",
            f"CLUSTER_ENABLED={_flag(config.performance.clustering.enabled)}",
            f"LOG_LEVEL={config.monitoring.logging.level.value}",
        ],
        "ports": ["3000:3000"],
        "depends_on": depends_on,
        "networks": [network],
        "healthcheck": {
            "test": ["CMD", "curl", "-f", "http://localhost:3000/health"],
            "interval": f"{health.interval}s",
            "timeout": f"{health.timeout}s",
            "retries": 3,
            "start_period": "30s",
        },
        "deploy": {
            "replicas": config.deployment.scaling.horizontal.min_replicas,
            "resources": {
                "limits": {"cpus": resources.limits.cpu, "memory": resources.limits.memory},
                "reservations": {"cpus": resources.requests.cpu, "memory": resources.requests.memory},
            },
            "restart_policy": {
                "condition": "on-failure",
                "delay": RESTART_DELAY,
                "max_attempts": RESTART_MAX_ATTEMPTS,
            },
        },
    }


def _redis(name: str, network: str) -> Dict[str, Any]:
    return {
        "image": "redis:7-alpine",
        "container_name": f"{name}-redis",
        "restart": "unless-stopped",
        "command": "redis-server --appendonly yes --maxmemory 256mb --maxmemory-policy allkeys-lru",
        "volumes": ["redis_data:/data"],
        "networks": [network],
        "healthcheck": {
            "test": ["CMD", "redis-cli", "ping"],
            "interval": "30s",
            "timeout": "10s",
            "retries": 3,
        },
    }


def _mongodb(name: str, network: str) -> Dict[str, Any]:
    return {
        "image": "mongo:7",
        "container_name": f"{name}-mongodb",
        "restart": "unless-stopped",
        "environment": [
            "MONGO_INITDB_ROOT_USERNAME=${MONGO_ROOT_USER:-admin}",
            "MONGO_INITDB_ROOT_PASSWORD=${MONGO_ROOT_PASSWORD}",
            f"MONGO_INITDB_DATABASE={MONGO_DATABASE}",
        ],
        "volumes": ["mongodb_data:/data/db", "./mongodb-init:/docker-entrypoint-initdb.d"],
        "networks": [network],
        "healthcheck": {
            "test": ["CMD", "mongosh", "--eval", "db.runCommand('ping')"],
            "interval": "30s",
            "timeout": "10s",
            "retries": 3,
        },
    }


def _nginx(name: str, network: str) -> Dict[str, Any]:
    return {
        "image": "nginx:alpine",
        "container_name": f"{name}-nginx",
        "restart": "unless-stopped",
        "ports": ["80:80", "443:443"],
        "volumes": ["./nginx.conf:/etc/nginx/nginx.conf:ro", "./ssl:/etc/ssl/certs:ro"],
        "depends_on": ["app"],
        "networks": [network],
        "healthcheck": {
            "test": ["CMD", "wget", "--quiet", "--tries=1", "--spider", "http://localhost/health"],
            "interval": "30s",
            "timeout": "10s",
            "retries": 3,
        },
    }


def _prometheus(name: str, network: str) -> Dict[str, Any]:
    return {
        "image": "prom/prometheus:latest",
        "container_name": f"{name}-prometheus",
        "restart": "unless-stopped",
        "ports": ["9090:9090"],
        "volumes": ["./prometheus.yml:/etc/prometheus/prometheus.yml:ro", "prometheus_data:/prometheus"],
        "networks": [network],
        "command": [
            "--config.file=/etc/prometheus/prometheus.yml",
            "--storage.tsdb.path=/prometheus",
            "--web.console.libraries=/etc/prometheus/console_libraries",
            "--web.console.templates=/etc/prometheus/consoles",
            "--storage.tsdb.retention.time=15d",
            "--web.enable-lifecycle",
        ],
    }


def _grafana(name: str, network: str) -> Dict[str, Any]:
    return {
        "image": "grafana/grafana:latest",
        "container_name": f"{name}-grafana",
        "restart": "unless-stopped",
        "ports": ["3001:3000"],
        "environment": ["GF_SECURITY_ADMIN_PASSWORD=${GRAFANA_ADMIN_PASSWORD:-admin}"],
        "volumes": ["grafana_data:/var/lib/grafana", "./grafana/provisioning:/etc/grafana/provisioning"],
        "networks": [network],
        "depends_on": ["prometheus"],
    }


def compose_document(config: ConfigTree) -> Dict[str, Any]:
    """Documento compose como dicionário (ordem de chaves estável)."""
    name = config.environment.name
    network = name

    redis_enabled = config.performance.caching.redis.enabled
    proxy_enabled = config.security.ssl.enabled
    metrics_enabled = config.monitoring.metrics.enabled

    services: Dict[str, Any] = {"app": _app(config, network)}
    volumes: Dict[str, Any] = {"mongodb_data": {"driver": "local"}}

    if redis_enabled:
        services["redis"] = _redis(name, network)
        volumes["redis_data"] = {"driver": "local"}

    services["mongodb"] = _mongodb(name, network)

    if proxy_enabled:
        services["nginx"] = _nginx(name, network)

    if metrics_enabled:
        services["prometheus"] = _prometheus(name, network)
        services["grafana"] = _grafana(name, network)
        volumes["prometheus_data"] = {"driver": "local"}
        volumes["grafana_data"] = {"driver": "local"}

    return {
        "version": COMPOSE_VERSION,
        "services": services,
        "networks": {network: {"driver": "bridge", "labels": ["traefik.enable=false"]}},
        "volumes": volumes,
    }


def render_docker_compose(config: ConfigTree) -> str:
    return yaml.safe_dump(compose_document(config), sort_keys=False, default_flow_style=False)
