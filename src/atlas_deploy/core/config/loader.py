# src/atlas_deploy/core/config/loader.py
"""
Loader canônico da configuração de produção do Atlas Deploy.

Este módulo resolve a configuração efetiva a partir de:
    - defaults tipados (tabela de overrides por variável de ambiente)
    - um arquivo persistido opcional (JSON, ou YAML pela extensão),
      aceito somente se íntegro segundo o checksum sidecar

Máquina de estados do load:
    1. DEFAULTS  → não há arquivo persistido: usa defaults
    2. PERSISTED → arquivo existe, parseia, passa na integridade e produz
                   uma árvore válida: defaults + overlay (deep-merge)
    3. FALLBACK  → arquivo existe, mas falha em qualquer etapa:
                   descarta, usa defaults e emite warning

Princípios fundamentais:
    - O boot de produção nunca é bloqueado por um arquivo corrompido
    - Toda falha de load é engolida no caminho de fallback, com warning
    - Campos ausentes no overlay mantêm o default

Limites explícitos:
    - Não persiste configuração (responsabilidade do ConfigManager)
    - Não executa validação semântica (responsabilidade do Validator)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml  # PyYAML

from ..events import EventLog
from .env import defaults
from .errors import (
    ConfigError,
    ConfigInvariantError,
    ConfigParseError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .integrity import IntegrityVerifier
from .merge import deep_merge
from .schema import ConfigTree, check_invariants


DEFAULT_CONFIG_PATH = "/etc/icepaca/production.json"
CONFIG_PATH_ENV = "PRODUCTION_CONFIG_PATH"

_YAML_SUFFIXES = {".yaml", ".yml"}
_JSON_SUFFIXES = {".json"}

_SOURCE = "config.loader"


class LoadOutcome(str, Enum):
    DEFAULTS = "defaults"
    PERSISTED = "persisted"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class LoadResult:
    """Resultado de um load: a árvore efetiva, o desfecho e os warnings emitidos."""

    config: ConfigTree
    outcome: LoadOutcome
    warnings: List[str] = field(default_factory=list)


def resolve_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Caminho do arquivo persistido: `PRODUCTION_CONFIG_PATH` ou o caminho fixo de sistema."""
    env = os.environ if environ is None else environ
    return Path(env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


# ---------------------------------------------------------------------------
# (de)serialização
# ---------------------------------------------------------------------------

def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        return "json"
    if suffix in _YAML_SUFFIXES:
        return "yaml"
    raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")


def parse_document(raw: bytes, path: Path) -> Dict[str, Any]:
    """
    Decodifica os bytes de um documento de configuração.

    Raises:
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        ConfigParseError: Se o conteúdo não for UTF-8/JSON/YAML válido.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    fmt = _format_for(path)

    try:
        text = raw.decode("utf-8")
        if fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (UnicodeDecodeError, ValueError, RecursionError, yaml.YAMLError) as e:
        # RecursionError: documento corrompido com aninhamento patológico
        raise ConfigParseError(str(e) or "failed to parse config") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def serialize_config(config: ConfigTree, path: Union[str, Path]) -> bytes:
    """
    Forma canônica em bytes da árvore completa.

    JSON: `indent=2`, chaves ordenadas, UTF-8, newline final.
    YAML: `safe_dump` com chaves ordenadas.
    """
    data = config.to_dict()
    if _format_for(Path(path)) == "yaml":
        text = yaml.safe_dump(data, sort_keys=True, allow_unicode=True, default_flow_style=False)
    else:
        text = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    return text.encode("utf-8")


# ---------------------------------------------------------------------------
# overlay
# ---------------------------------------------------------------------------

def apply_overlay(base: ConfigTree, overlay: Dict[str, Any]) -> ConfigTree:
    """
    Sobrepõe um documento parcial à árvore base e devolve uma nova árvore.

    Raises:
        ConfigTypeConflictError: conflito estrutural no merge.
        InvalidConfigValueError: chave desconhecida ou tipo incorreto.
        ConfigInvariantError: a árvore resultante viola invariantes.
    """
    merged = ConfigTree.from_dict(deep_merge(base.to_dict(), overlay))
    violations = check_invariants(merged)
    if violations:
        raise ConfigInvariantError(violations)
    return merged


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------

def load_config(
    *,
    path: Union[str, Path],
    environ: Optional[Mapping[str, str]] = None,
    verifier: Optional[IntegrityVerifier] = None,
    events: Optional[EventLog] = None,
) -> LoadResult:
    """
    Carrega e resolve a configuração efetiva de produção.

    Política de resolução:
        - Defaults são sempre construídos primeiro (nunca falham)
        - O arquivo persistido é opcional
        - Quando íntegro e válido, o arquivo tem prioridade sobre os defaults
        - Qualquer falha no arquivo leva ao fallback com warning

    Args:
        path: caminho do arquivo persistido.
        environ: variáveis de ambiente para os defaults (padrão: `os.environ`).
        verifier: verificador de integridade (padrão: sidecar `<path>.checksum`).
        events: log de eventos onde warnings são registrados.

    Returns:
        LoadResult: árvore efetiva, desfecho e warnings emitidos neste load.
    """
    config_path = Path(path)
    log = events if events is not None else EventLog()
    verifier = verifier or IntegrityVerifier.for_config(config_path, events=log)

    base = defaults(environ)
    violations = check_invariants(base)
    if violations:
        # defaults nunca falham; violações ficam visíveis para o Validator
        log.log(source=_SOURCE, level="warning", message="Defaults violam invariantes", violations=violations)

    warnings: List[str] = []

    def _fallback(message: str) -> LoadResult:
        warnings.append(message)
        log.add_warning(source=_SOURCE, message=message, path=str(config_path))
        return LoadResult(config=base, outcome=LoadOutcome.FALLBACK, warnings=warnings)

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError:
        log.log(source=_SOURCE, level="info", message=f"Sem configuração persistida em {config_path}, usando defaults")
        return LoadResult(config=base, outcome=LoadOutcome.DEFAULTS)
    except OSError as e:
        return _fallback(f"Falha ao ler configuração persistida {config_path}: {e}; usando defaults")

    try:
        overlay = parse_document(raw, config_path)
    except ConfigError as e:
        return _fallback(f"Configuração persistida inválida em {config_path}: {e}; usando defaults")

    if not verifier.verify(raw):
        return _fallback(f"Falha na verificação de integridade de {config_path}; usando defaults")

    try:
        effective = apply_overlay(base, overlay)
    except ConfigError as e:
        return _fallback(f"Configuração persistida rejeitada em {config_path}: {e}; usando defaults")

    log.log(source=_SOURCE, level="info", message=f"Configuração persistida carregada de {config_path}")
    return LoadResult(config=effective, outcome=LoadOutcome.PERSISTED)
