"""
Modelo de variantes dos artefatos de deploy (v1).

Cada decisão condicional de um artefato é materializada como uma variante
explícita, escolhida uma única vez a partir da configuração e depois
renderizada por funções de dispatch exaustivo (variante desconhecida →
`TypeError`). Nenhum artefato é montado por splicing de fragmentos de texto.

Variantes:
- RolloutStrategy  = RollingUpdate | Recreate
- Compression      = GzipCompression | NoCompression
- Hsts             = HstsHeader | NoHsts
- Listener         = TlsTermination | PlainHttp
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from atlas_deploy.core.config.schema import (
    CompressionPolicy,
    DeploymentStrategy,
    RateLimitPolicy,
    TlsSettings,
)


# ---------------------------------------------------------------------------
# Rollout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RollingUpdate:
    max_surge: int = 1
    max_unavailable: int = 1


@dataclass(frozen=True)
class Recreate:
    pass


RolloutStrategy = Union[RollingUpdate, Recreate]


def rollout_for(strategy: DeploymentStrategy) -> RolloutStrategy:
    """`rolling` → RollingUpdate (limites fixos de 1); qualquer outra → Recreate."""
    if strategy == DeploymentStrategy.ROLLING:
        return RollingUpdate()
    return Recreate()


# ---------------------------------------------------------------------------
# Compressão
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GzipCompression:
    level: int


@dataclass(frozen=True)
class NoCompression:
    pass


Compression = Union[GzipCompression, NoCompression]


def compression_for(policy: CompressionPolicy) -> Compression:
    if policy.gzip:
        return GzipCompression(level=policy.level)
    return NoCompression()


# ---------------------------------------------------------------------------
# HSTS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HstsHeader:
    max_age: int


@dataclass(frozen=True)
class NoHsts:
    pass


Hsts = Union[HstsHeader, NoHsts]


def hsts_for(ssl: TlsSettings) -> Hsts:
    if ssl.hsts:
        return HstsHeader(max_age=ssl.hsts_max_age)
    return NoHsts()


# ---------------------------------------------------------------------------
# Listener (terminação TLS)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TlsTermination:
    certificate_path: str
    key_path: str


@dataclass(frozen=True)
class PlainHttp:
    pass


Listener = Union[TlsTermination, PlainHttp]


def listener_for(ssl: TlsSettings) -> Listener:
    if ssl.enabled:
        return TlsTermination(certificate_path=ssl.certificate_path, key_path=ssl.key_path)
    return PlainHttp()


# ---------------------------------------------------------------------------
# Rate limit e timeouts de proxy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RateLimitZone:
    requests_per_minute: int
    name: str = "api"
    size: str = "10m"


def rate_limit_zone_for(policy: RateLimitPolicy) -> RateLimitZone:
    """
    requests/minuto = floor(max_requests / (window_ms / 60000)).

    Calculado em aritmética inteira. Árvores aceitas por load/update já
    garantem ao menos 1 r/m (`check_invariants`); o piso de 1 cobre árvores
    montadas diretamente (nginx rejeita `rate=0r/m`).
    """
    if policy.window_ms <= 0:
        raise ValueError("rate_limiting.window_ms must be positive")
    rpm = (policy.max_requests * 60000) // policy.window_ms
    return RateLimitZone(requests_per_minute=max(1, rpm))


@dataclass(frozen=True)
class ProxyTimeouts:
    connect: str
    send: str
    read: str


API_TIMEOUTS = ProxyTimeouts(connect="5s", send="10s", read="30s")
DEFAULT_TIMEOUTS = ProxyTimeouts(connect="5s", send="10s", read="60s")
