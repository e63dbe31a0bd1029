# src/atlas_deploy/core/config/env.py
"""
Defaults da configuração de produção, com overrides por variável de ambiente.

Cada folha da árvore de configuração é declarada uma única vez numa
tabela `{caminho, variável de ambiente, parser, default literal}`,
avaliada de uma só vez em `defaults()` para produzir um `ConfigTree`
totalmente tipado.

Política única de fallback:
    - variável ausente ou vazia       → default literal
    - valor rejeitado pelo parser     → default literal (nunca erro)

Decisões arquiteturais:
    - Nenhum parsing ad hoc por campo: todo campo passa pela mesma regra
    - `defaults()` é pura: lê apenas o mapeamento recebido
      (por padrão, `os.environ`)
    - A tabela é a única fonte dos valores literais de produção

Limites explícitos:
    - Não lê arquivos
    - Não verifica invariantes (responsabilidade de `check_invariants`)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from .schema import CdnProvider, ConfigTree, DeploymentStrategy, LogLevel, WORKERS_AUTO


class _Rejected(ValueError):
    """Valor de ambiente rejeitado por um parser (leva ao default literal)."""


Parser = Callable[[str], Any]


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

def parse_str(raw: str) -> str:
    return raw


def parse_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise _Rejected(raw) from None


def parse_csv(raw: str) -> Tuple[str, ...]:
    items = tuple(x.strip() for x in raw.split(",") if x.strip())
    if not items:
        raise _Rejected(raw)
    return items


def enabled_unless_false(raw: str) -> bool:
    return raw != "false"


def enabled_if_true(raw: str) -> bool:
    return raw == "true"


def parse_workers(raw: str) -> Any:
    if raw == WORKERS_AUTO:
        return WORKERS_AUTO
    value = parse_int(raw)
    if value < 0:
        raise _Rejected(raw)
    return value


def parse_choice(enum_cls: Type[Enum]) -> Parser:
    def _parse(raw: str) -> str:
        try:
            return enum_cls(raw).value
        except ValueError:
            raise _Rejected(raw) from None

    return _parse


# ---------------------------------------------------------------------------
# Tabela declarativa
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnvOverride:
    """Uma folha da árvore: onde fica, qual variável a sobrescreve, como parsear."""

    path: str
    env_var: str
    parser: Parser
    default: Any

    def resolve(self, environ: Mapping[str, str]) -> Any:
        raw = environ.get(self.env_var)
        if raw is None or raw == "":
            return self.default
        try:
            return self.parser(raw)
        except _Rejected:
            return self.default


def _table() -> List[EnvOverride]:
    E = EnvOverride
    return [
        # environment
        E("environment.name", "ENVIRONMENT_NAME", parse_str, "icepaca-production"),
        E("environment.domain", "PRODUCTION_DOMAIN", parse_str, "icepaca.com"),
        E("environment.cdn_url", "CDN_URL", parse_str, "https://cdn.icepaca.com"),
        E("environment.api_url", "API_URL", parse_str, "https://api.icepaca.com"),
        # security
        E("security.ssl.enabled", "SSL_ENABLED", enabled_unless_false, True),
        E("security.ssl.certificate_path", "SSL_CERT_PATH", parse_str, "/etc/ssl/certs/icepaca.com.crt"),
        E("security.ssl.key_path", "SSL_KEY_PATH", parse_str, "/etc/ssl/private/icepaca.com.key"),
        E("security.ssl.hsts", "HSTS_ENABLED", enabled_unless_false, True),
        E("security.ssl.hsts_max_age", "HSTS_MAX_AGE", parse_int, 31536000),
        E("security.firewall.enabled", "FIREWALL_ENABLED", enabled_unless_false, True),
        E("security.firewall.allowed_ips", "ALLOWED_IPS", parse_csv, ("0.0.0.0/0",)),
        E("security.firewall.rate_limiting.window_ms", "RATE_LIMIT_WINDOW_MS", parse_int, 15 * 60 * 1000),
        E("security.firewall.rate_limiting.max_requests", "RATE_LIMIT_MAX_REQUESTS", parse_int, 100),
        E("security.encryption.algorithm", "ENCRYPTION_ALGORITHM", parse_str, "aes-256-gcm"),
        E("security.encryption.key_rotation_days", "KEY_ROTATION_DAYS", parse_int, 90),
        # performance
        E("performance.caching.redis.enabled", "REDIS_ENABLED", enabled_unless_false, True),
        E("performance.caching.redis.cluster", "REDIS_CLUSTER", enabled_if_true, False),
        E("performance.caching.redis.ttl", "CACHE_TTL", parse_int, 3600),
        E("performance.caching.cdn.enabled", "CDN_ENABLED", enabled_unless_false, True),
        E("performance.caching.cdn.provider", "CDN_PROVIDER", parse_choice(CdnProvider), CdnProvider.CLOUDFLARE.value),
        E("performance.caching.cdn.cache_ttl", "CDN_CACHE_TTL", parse_int, 86400),
        E("performance.compression.gzip", "GZIP_ENABLED", enabled_unless_false, True),
        E("performance.compression.brotli", "BROTLI_ENABLED", enabled_unless_false, True),
        E("performance.compression.level", "COMPRESSION_LEVEL", parse_int, 6),
        E("performance.clustering.enabled", "CLUSTERING_ENABLED", enabled_unless_false, True),
        E("performance.clustering.workers", "CLUSTER_WORKERS", parse_workers, 0),
        # monitoring
        E("monitoring.health_checks.enabled", "HEALTH_CHECKS_ENABLED", enabled_unless_false, True),
        E("monitoring.health_checks.interval", "HEALTH_CHECK_INTERVAL", parse_int, 30),
        E("monitoring.health_checks.timeout", "HEALTH_CHECK_TIMEOUT", parse_int, 10),
        E("monitoring.health_checks.endpoints", "HEALTH_CHECK_ENDPOINTS", parse_csv, ("/health", "/api/health", "/metrics")),
        E("monitoring.logging.level", "LOG_LEVEL", parse_choice(LogLevel), LogLevel.INFO.value),
        E("monitoring.logging.structured", "STRUCTURED_LOGS", enabled_unless_false, True),
        E("monitoring.logging.retention", "LOG_RETENTION_DAYS", parse_int, 30),
        E("monitoring.metrics.enabled", "METRICS_ENABLED", enabled_unless_false, True),
        E("monitoring.metrics.exporters", "METRICS_EXPORTERS", parse_csv, ("prometheus", "datadog", "cloudwatch")),
        E("monitoring.metrics.scrape_interval", "METRICS_SCRAPE_INTERVAL", parse_int, 15),
        # deployment
        E("deployment.strategy", "DEPLOYMENT_STRATEGY", parse_choice(DeploymentStrategy), DeploymentStrategy.ROLLING.value),
        E("deployment.rollback.enabled", "ROLLBACK_ENABLED", enabled_unless_false, True),
        E("deployment.rollback.automatic", "AUTO_ROLLBACK", enabled_if_true, False),
        E("deployment.rollback.threshold", "ROLLBACK_ERROR_THRESHOLD", parse_int, 5),
        E("deployment.scaling.horizontal.enabled", "HORIZONTAL_SCALING", enabled_unless_false, True),
        E("deployment.scaling.horizontal.min_replicas", "MIN_REPLICAS", parse_int, 3),
        E("deployment.scaling.horizontal.max_replicas", "MAX_REPLICAS", parse_int, 10),
        E("deployment.scaling.horizontal.target_cpu_utilization", "TARGET_CPU_UTILIZATION", parse_int, 70),
        E("deployment.scaling.vertical.enabled", "VERTICAL_SCALING", enabled_if_true, False),
        E("deployment.scaling.vertical.resources.requests.cpu", "CPU_REQUEST", parse_str, "500m"),
        E("deployment.scaling.vertical.resources.requests.memory", "MEMORY_REQUEST", parse_str, "1Gi"),
        E("deployment.scaling.vertical.resources.limits.cpu", "CPU_LIMIT", parse_str, "2"),
        E("deployment.scaling.vertical.resources.limits.memory", "MEMORY_LIMIT", parse_str, "4Gi"),
        # database
        E("database.connection.pool_size", "DB_POOL_SIZE", parse_int, 20),
        E("database.connection.max_retries", "DB_MAX_RETRIES", parse_int, 5),
        E("database.connection.retry_delay", "DB_RETRY_DELAY", parse_int, 1000),
        E("database.optimization.indexing", "DB_INDEXING", enabled_unless_false, True),
        E("database.optimization.query_optimization", "DB_QUERY_OPTIMIZATION", enabled_unless_false, True),
        E("database.optimization.connection_pooling", "DB_CONNECTION_POOLING", enabled_unless_false, True),
        E("database.backup.enabled", "DB_BACKUP_ENABLED", enabled_unless_false, True),
        E("database.backup.schedule", "DB_BACKUP_SCHEDULE", parse_str, "0 2 * * *"),
        E("database.backup.retention", "DB_BACKUP_RETENTION", parse_int, 30),
    ]


ENV_OVERRIDES: List[EnvOverride] = _table()


def _assign(tree: Dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    node = tree
    for p in parents:
        node = node.setdefault(p, {})
    node[leaf] = value


def defaults_dict(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Forma em dicionário dos defaults resolvidos contra `environ`."""
    env = os.environ if environ is None else environ
    out: Dict[str, Any] = {}
    for entry in ENV_OVERRIDES:
        _assign(out, entry.path, entry.resolve(env))
    return out


def literal_defaults() -> ConfigTree:
    """Defaults literais, ignorando qualquer variável de ambiente."""
    return ConfigTree.from_dict(defaults_dict({}))


def defaults(environ: Optional[Mapping[str, str]] = None) -> ConfigTree:
    """
    Constrói a árvore de configuração padrão.

    Pura e sem modo de falha: cada folha vem da variável de ambiente
    correspondente ou, na ausência/rejeição dela, do default literal.

    Args:
        environ: mapeamento de variáveis de ambiente (padrão: `os.environ`).

    Returns:
        ConfigTree: configuração padrão totalmente tipada.
    """
    return ConfigTree.from_dict(defaults_dict(environ))
