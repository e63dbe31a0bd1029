# src/atlas_deploy/core/config/validator.py
"""
Validação semântica da configuração de produção.

Regras (todas avaliadas, resultados acumulados, sem short-circuit):
    - erro: TLS habilitado e certificado inexistente no disco
    - erro: TLS habilitado e chave privada inexistente no disco
    - erro: domínio do ambiente vazio
    - erro: min_replicas > max_replicas
    - warning: workers "auto" com health checks desabilitados
    - warning: cache redis habilitado sem connection string externa
    - warning: allow-list do firewall contém 0.0.0.0/0

Decisões arquiteturais:
    - A validação é report-only: nunca levanta, nunca bloqueia o load
    - Warnings nunca afetam `valid`
    - O nome da variável da connection string é um parâmetro
      (contrato com um colaborador externo), não uma constante embutida
    - Existência de arquivos é consultada via `path_exists` injetável
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..errors import (
    DeployIssuePayload,
    SEVERITY_ERROR,
    auto_clustering_unsupervised,
    cache_connection_missing,
    domain_required,
    firewall_allows_all,
    replica_bounds_invalid,
    tls_certificate_not_found,
    tls_key_not_found,
)
from .schema import ALLOW_ALL_CIDR, ConfigTree


DEFAULT_CACHE_URL_ENV = "REDIS_URL"


@dataclass(frozen=True)
class ValidationReport:
    """Resultado da validação: `valid` é verdadeiro sse não há erros."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    issues: List[DeployIssuePayload] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "issues": [i.to_dict() for i in self.issues],
        }


def validate_config(
    config: ConfigTree,
    *,
    environ: Optional[Mapping[str, str]] = None,
    cache_url_env: str = DEFAULT_CACHE_URL_ENV,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> ValidationReport:
    """
    Executa as regras semânticas sobre a árvore de configuração.

    Args:
        config: árvore a validar.
        environ: contexto de ambiente (padrão: `os.environ`).
        cache_url_env: variável que carrega a connection string do cache.
        path_exists: predicado de existência de arquivo.

    Returns:
        ValidationReport: erros, warnings e payloads estruturados.
    """
    env = os.environ if environ is None else environ
    issues: List[DeployIssuePayload] = []

    ssl = config.security.ssl
    if ssl.enabled:
        if not path_exists(ssl.certificate_path):
            issues.append(tls_certificate_not_found(path=ssl.certificate_path))
        if not path_exists(ssl.key_path):
            issues.append(tls_key_not_found(path=ssl.key_path))

    if not config.environment.domain.strip():
        issues.append(domain_required())

    horizontal = config.deployment.scaling.horizontal
    if horizontal.min_replicas > horizontal.max_replicas:
        issues.append(
            replica_bounds_invalid(
                min_replicas=horizontal.min_replicas,
                max_replicas=horizontal.max_replicas,
            )
        )

    if config.performance.clustering.auto and not config.monitoring.health_checks.enabled:
        issues.append(auto_clustering_unsupervised())

    if config.performance.caching.redis.enabled and not env.get(cache_url_env):
        issues.append(cache_connection_missing(env_var=cache_url_env))

    if ALLOW_ALL_CIDR in config.security.firewall.allowed_ips:
        issues.append(firewall_allows_all(cidr=ALLOW_ALL_CIDR))

    errors = [i.message for i in issues if i.severity == SEVERITY_ERROR]
    warnings = [i.message for i in issues if i.severity != SEVERITY_ERROR]

    return ValidationReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        issues=issues,
    )
