# src/atlas_deploy/core/config/schema.py
"""
Schema canônico — árvore de configuração de produção (v1).

Este módulo define a forma tipada da configuração de produção do
Atlas Deploy: uma única árvore de dataclasses imutáveis, sem ciclos
e sem subestruturas mutáveis compartilhadas.

Seções:
    - environment  → identidade do ambiente (nome, domínio, URLs de CDN e API)
    - security     → TLS, firewall/rate-limit, criptografia
    - performance  → cache (redis/CDN), compressão, clustering de workers
    - monitoring   → health checks, logging, exporters de métricas
    - deployment   → estratégia de rollout, rollback, escala horizontal/vertical
    - database     → pool de conexões, otimizações, backup

Decisões arquiteturais:
    - Dataclasses `frozen=True` e tuplas: a árvore é um valor, não um objeto mutável
    - Enums com valores textuais canônicos (serializáveis em JSON/YAML)
    - `from_dict` é estrito: chaves desconhecidas, ausentes ou com tipo
      incorreto levantam `InvalidConfigValueError`
    - Invariantes cruzados são verificados por `check_invariants`, fora do
      construtor, para que o Validator possa inspecionar árvores inválidas

Esta implementação evita dependências externas (ex.: Pydantic) para manter
o core leve.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Tuple, Type, TypeVar, Union, get_type_hints

from .errors import InvalidConfigValueError


WORKERS_AUTO = "auto"
ALLOW_ALL_CIDR = "0.0.0.0/0"

# número fixo de workers ou dimensionamento automático
Workers = Union[int, str]

T = TypeVar("T")


class CdnProvider(str, Enum):
    CLOUDFLARE = "cloudflare"
    AWS_CLOUDFRONT = "aws-cloudfront"
    FASTLY = "fastly"


class LogLevel(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class DeploymentStrategy(str, Enum):
    """
    Estratégia de rollout declarada na configuração.

    Apenas `rolling` produz uma política RollingUpdate no manifest de
    orquestração; as demais são materializadas como Recreate.
    """

    ROLLING = "rolling"
    BLUE_GREEN = "blue-green"
    CANARY = "canary"


# ---------------------------------------------------------------------------
# environment
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnvironmentIdentity:
    name: str
    domain: str
    cdn_url: str
    api_url: str


# ---------------------------------------------------------------------------
# security
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TlsSettings:
    enabled: bool
    certificate_path: str
    key_path: str
    hsts: bool
    hsts_max_age: int


@dataclass(frozen=True)
class RateLimitPolicy:
    window_ms: int
    max_requests: int


@dataclass(frozen=True)
class FirewallPolicy:
    enabled: bool
    allowed_ips: Tuple[str, ...]
    rate_limiting: RateLimitPolicy


@dataclass(frozen=True)
class EncryptionPolicy:
    algorithm: str
    key_rotation_days: int


@dataclass(frozen=True)
class SecurityPolicy:
    ssl: TlsSettings
    firewall: FirewallPolicy
    encryption: EncryptionPolicy


# ---------------------------------------------------------------------------
# performance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RedisCachePolicy:
    enabled: bool
    cluster: bool
    ttl: int


@dataclass(frozen=True)
class CdnCachePolicy:
    enabled: bool
    provider: CdnProvider
    cache_ttl: int


@dataclass(frozen=True)
class CachingPolicy:
    redis: RedisCachePolicy
    cdn: CdnCachePolicy


@dataclass(frozen=True)
class CompressionPolicy:
    gzip: bool
    brotli: bool
    level: int


@dataclass(frozen=True)
class ClusteringPolicy:
    enabled: bool
    workers: Workers

    def __post_init__(self) -> None:
        if isinstance(self.workers, str):
            if self.workers != WORKERS_AUTO:
                raise InvalidConfigValueError(
                    f"performance.clustering.workers must be an int or '{WORKERS_AUTO}', got {self.workers!r}"
                )
        elif self.workers < 0:
            raise InvalidConfigValueError("performance.clustering.workers must be >= 0")

    @property
    def auto(self) -> bool:
        return self.workers == WORKERS_AUTO


@dataclass(frozen=True)
class PerformancePolicy:
    caching: CachingPolicy
    compression: CompressionPolicy
    clustering: ClusteringPolicy


# ---------------------------------------------------------------------------
# monitoring
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HealthCheckPolicy:
    enabled: bool
    interval: int
    timeout: int
    endpoints: Tuple[str, ...]


@dataclass(frozen=True)
class LoggingPolicy:
    level: LogLevel
    structured: bool
    retention: int


@dataclass(frozen=True)
class MetricsPolicy:
    enabled: bool
    exporters: Tuple[str, ...]
    scrape_interval: int


@dataclass(frozen=True)
class MonitoringPolicy:
    health_checks: HealthCheckPolicy
    logging: LoggingPolicy
    metrics: MetricsPolicy


# ---------------------------------------------------------------------------
# deployment
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RollbackPolicy:
    enabled: bool
    automatic: bool
    threshold: int


@dataclass(frozen=True)
class HorizontalScaling:
    enabled: bool
    min_replicas: int
    max_replicas: int
    target_cpu_utilization: int


@dataclass(frozen=True)
class ResourceQuantity:
    cpu: str
    memory: str


@dataclass(frozen=True)
class ResourceSpec:
    requests: ResourceQuantity
    limits: ResourceQuantity


@dataclass(frozen=True)
class VerticalScaling:
    enabled: bool
    resources: ResourceSpec


@dataclass(frozen=True)
class ScalingPolicy:
    horizontal: HorizontalScaling
    vertical: VerticalScaling


@dataclass(frozen=True)
class DeploymentPolicy:
    strategy: DeploymentStrategy
    rollback: RollbackPolicy
    scaling: ScalingPolicy


# ---------------------------------------------------------------------------
# database
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionPoolPolicy:
    pool_size: int
    max_retries: int
    retry_delay: int


@dataclass(frozen=True)
class DatabaseOptimization:
    indexing: bool
    query_optimization: bool
    connection_pooling: bool


@dataclass(frozen=True)
class BackupPolicy:
    enabled: bool
    schedule: str
    retention: int


@dataclass(frozen=True)
class DatabasePolicy:
    connection: ConnectionPoolPolicy
    optimization: DatabaseOptimization
    backup: BackupPolicy


# ---------------------------------------------------------------------------
# root
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigTree:
    """Representação interna explícita da configuração de produção (v1)."""

    environment: EnvironmentIdentity
    security: SecurityPolicy
    performance: PerformancePolicy
    monitoring: MonitoringPolicy
    deployment: DeploymentPolicy
    database: DatabasePolicy

    def to_dict(self) -> Dict[str, Any]:
        """Forma em dicionário puro (enum → valor, tupla → lista)."""
        return _to_plain(self)

    @classmethod
    def from_dict(cls, data: Any) -> "ConfigTree":
        """Valida e materializa uma árvore completa a partir de um dicionário."""
        return _build(cls, data, "")


# ---------------------------------------------------------------------------
# (de)serialização genérica
# ---------------------------------------------------------------------------

def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, list)):
        return [_to_plain(v) for v in value]
    return value


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise InvalidConfigValueError(msg)


def _is_int(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def _build(cls: Type[T], data: Any, path: str) -> T:
    where = path or "<root>"
    _expect(isinstance(data, dict), f"{where} must be a mapping")

    hints = get_type_hints(cls)
    names = [f.name for f in fields(cls)]

    unknown = sorted(set(data) - set(names))
    _expect(not unknown, f"unknown keys at {where}: {unknown}")

    kwargs: Dict[str, Any] = {}
    for name in names:
        key_path = f"{path}.{name}" if path else name
        _expect(name in data, f"missing key: {key_path}")
        kwargs[name] = _coerce(hints[name], data[name], key_path)
    return cls(**kwargs)


def _coerce(tp: Any, value: Any, path: str) -> Any:
    if dataclasses.is_dataclass(tp):
        return _build(tp, value, path)

    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError:
            allowed = [m.value for m in tp]
            raise InvalidConfigValueError(f"{path} must be one of {allowed}, got {value!r}") from None

    if tp is bool:
        _expect(isinstance(value, bool), f"{path} must be boolean")
        return value
    if tp is int:
        _expect(_is_int(value), f"{path} must be an integer")
        return value
    if tp is str:
        _expect(isinstance(value, str), f"{path} must be a string")
        return value

    origin = typing.get_origin(tp)
    if origin is tuple:
        _expect(
            isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value),
            f"{path} must be a list of strings",
        )
        return tuple(value)
    if origin is Union:
        # Workers: int | "auto" (o literal é conferido pelo __post_init__)
        _expect(_is_int(value) or isinstance(value, str), f"{path} must be an integer or string")
        return value

    raise TypeError(f"unsupported schema type at {path}: {tp!r}")  # pragma: no cover


# ---------------------------------------------------------------------------
# invariantes
# ---------------------------------------------------------------------------

def check_invariants(tree: ConfigTree) -> List[str]:
    """
    Retorna as violações dos invariantes da árvore (lista vazia = ok).

    Invariantes:
        - min_replicas <= max_replicas
        - TLS habilitado ⇒ certificate_path e key_path não vazios
        - environment.domain não vazio
        - rate_limiting.window_ms e max_requests positivos
        - rate_limiting resulta em pelo menos 1 requisição por minuto
    """
    violations: List[str] = []

    horizontal = tree.deployment.scaling.horizontal
    if horizontal.min_replicas > horizontal.max_replicas:
        violations.append(
            f"deployment.scaling.horizontal.min_replicas ({horizontal.min_replicas}) "
            f"> max_replicas ({horizontal.max_replicas})"
        )

    ssl = tree.security.ssl
    if ssl.enabled:
        if not ssl.certificate_path.strip():
            violations.append("security.ssl.certificate_path is required when TLS is enabled")
        if not ssl.key_path.strip():
            violations.append("security.ssl.key_path is required when TLS is enabled")

    if not tree.environment.domain.strip():
        violations.append("environment.domain must be a non-empty string")

    rate = tree.security.firewall.rate_limiting
    if rate.window_ms <= 0:
        violations.append("security.firewall.rate_limiting.window_ms must be a positive integer")
    if rate.max_requests <= 0:
        violations.append("security.firewall.rate_limiting.max_requests must be a positive integer")
    if rate.window_ms > 0 and rate.max_requests > 0 and rate.max_requests * 60000 < rate.window_ms:
        violations.append(
            "security.firewall.rate_limiting allows fewer than 1 request per minute "
            f"({rate.max_requests} per {rate.window_ms}ms)"
        )

    return violations
