"""
Atlas Deploy — Canonical Issue Structures (v1)

Este módulo define o padrão canônico dos problemas reportados pela
validação semântica da configuração de produção.

Problemas são artefatos de domínio e fazem parte do contrato operacional
do sistema, devendo ser:

- explícitos
- serializáveis
- acionáveis

A validação nunca levanta exceções: ela devolve estes payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeployIssuePayload:
    """
    Payload canônico de um problema de configuração.

    Campos:
    - type: código estável do problema (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - severity: "error" (invalida a configuração) ou "warning" (apenas informa)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    severity: str = SEVERITY_ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do problema."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos (v1)
# ---------------------------------------------------------------------------

# Erros
TLS_CERTIFICATE_NOT_FOUND = "TLS_CERTIFICATE_NOT_FOUND"
TLS_KEY_NOT_FOUND = "TLS_KEY_NOT_FOUND"
DOMAIN_REQUIRED = "DOMAIN_REQUIRED"
REPLICA_BOUNDS_INVALID = "REPLICA_BOUNDS_INVALID"

# Warnings
AUTO_CLUSTERING_UNSUPERVISED = "AUTO_CLUSTERING_UNSUPERVISED"
CACHE_CONNECTION_MISSING = "CACHE_CONNECTION_MISSING"
FIREWALL_ALLOWS_ALL = "FIREWALL_ALLOWS_ALL"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def tls_certificate_not_found(
    *,
    path: str,
    hint: str = "Provisione o certificado no caminho indicado ou ajuste security.ssl.certificate_path.",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=TLS_CERTIFICATE_NOT_FOUND,
        message=f"SSL certificate not found: {path}",
        details={"path": path, "config_key": "security.ssl.certificate_path"},
        hint=hint,
    )


def tls_key_not_found(
    *,
    path: str,
    hint: str = "Provisione a chave privada no caminho indicado ou ajuste security.ssl.key_path.",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=TLS_KEY_NOT_FOUND,
        message=f"SSL key not found: {path}",
        details={"path": path, "config_key": "security.ssl.key_path"},
        hint=hint,
    )


def domain_required(
    *,
    hint: str = "Defina environment.domain (ou PRODUCTION_DOMAIN).",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=DOMAIN_REQUIRED,
        message="Production domain is required",
        details={"config_key": "environment.domain"},
        hint=hint,
    )


def replica_bounds_invalid(
    *,
    min_replicas: int,
    max_replicas: int,
    hint: str = "Ajuste MIN_REPLICAS/MAX_REPLICAS para que min <= max.",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=REPLICA_BOUNDS_INVALID,
        message="Minimum replicas cannot be greater than maximum replicas",
        details={"min_replicas": min_replicas, "max_replicas": max_replicas},
        hint=hint,
    )


def auto_clustering_unsupervised(
    *,
    hint: str = "Habilite monitoring.health_checks ou fixe o número de workers.",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=AUTO_CLUSTERING_UNSUPERVISED,
        message="Auto-clustering without health checks may cause issues",
        details={"workers": "auto", "health_checks_enabled": False},
        hint=hint,
        severity=SEVERITY_WARNING,
    )


def cache_connection_missing(
    *,
    env_var: str,
    hint: Optional[str] = None,
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=CACHE_CONNECTION_MISSING,
        message=f"Redis caching enabled but {env_var} not configured",
        details={"env_var": env_var},
        hint=hint or f"Defina {env_var} ou desabilite performance.caching.redis.",
        severity=SEVERITY_WARNING,
    )


def firewall_allows_all(
    *,
    cidr: str,
    hint: str = "Restrinja security.firewall.allowed_ips (ALLOWED_IPS) às origens conhecidas.",
) -> DeployIssuePayload:
    return DeployIssuePayload(
        type=FIREWALL_ALLOWS_ALL,
        message="Firewall allows all IPs - consider restricting access",
        details={"cidr": cidr},
        hint=hint,
        severity=SEVERITY_WARNING,
    )
