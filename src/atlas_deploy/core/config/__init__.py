# src/atlas_deploy/core/config/__init__.py

"""
Camada de configuração do Atlas Deploy.

Responsabilidades do pacote:
    - Defaults tipados derivados de variáveis de ambiente
    - Load do arquivo persistido (JSON/YAML) com verificação de checksum
      e fallback para defaults
    - Deep-merge determinístico de updates parciais
    - Validação semântica report-only
    - ConfigManager (`.manager`): estado corrente, persistência e renderização

Invariantes:
    - A árvore de configuração é imutável; updates produzem nova árvore
    - Árvores aceitas pelo load ou update satisfazem as invariantes
      estruturais (réplicas, TLS, domínio, rate limit)
    - O checksum registrado corresponde aos bytes exatamente gravados

Limites explícitos:
    - Não renderiza artefatos (delegado a `atlas_deploy.artifacts`)
    - Não mantém singleton de módulo
    - `manager` não é reexportado aqui: ele depende de `atlas_deploy.artifacts`,
      que por sua vez depende desta camada
"""

from .errors import (
    ConfigError,
    ConfigInvariantError,
    ConfigNotInitializedError,
    ConfigParseError,
    ConfigPersistError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .schema import ConfigTree, check_invariants
from .env import defaults
from .loader import LoadOutcome, LoadResult, load_config
from .validator import ValidationReport, validate_config

__all__ = [
    "ConfigError",
    "ConfigInvariantError",
    "ConfigNotInitializedError",
    "ConfigParseError",
    "ConfigPersistError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "ConfigTree",
    "check_invariants",
    "defaults",
    "LoadOutcome",
    "LoadResult",
    "load_config",
    "ValidationReport",
    "validate_config",
]
