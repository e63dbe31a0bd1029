# src/atlas_deploy/core/config/merge.py
"""
Utilitário canônico de deep-merge de configuração.

Este módulo implementa a política de merge usada pelo Atlas Deploy para
sobrepor documentos parciais (arquivo persistido, atualizações) sobre a
forma em dicionário da árvore de configuração.

Política de merge (v1):
    - dict + dict        → merge recursivo por chave
    - list               → sobrescrita total (sem merge elemento a elemento)
    - escalar            → sobrescrita direta
    - dict vs não-dict   → erro estrutural explícito

Tipos escalares não são verificados aqui: a árvore tipada
(`ConfigTree.from_dict`) é a única autoridade sobre tipos de folha.

Invariantes:
    - A mesma entrada sempre produz a mesma saída
    - Chaves não sobrescritas são preservadas
    - Nenhum input é mutado

Limites explícitos:
    - Não carrega arquivos de configuração
    - Não valida semântica de domínio
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Esta função combina uma configuração base com um conjunto de overrides
    explícitos, produzindo uma nova estrutura resultante sem mutar
    nenhum dos inputs.

    Decisões arquiteturais:
        - O merge é puramente funcional (inputs não são mutados)
        - Uma seção (dict) nunca pode ser substituída por um escalar
          nem o contrário
        - Campos ausentes no override mantêm o valor da base

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos da configuração.

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito estrutural entre base e override.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        # dict -> merge recursivo
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        # seção vs folha
        if isinstance(base_value, dict) or isinstance(override_value, dict):
            raise ConfigTypeConflictError(
                f"Conflito estrutural na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        # list / escalar -> sobrescrita
        result[key] = deepcopy(override_value)

    return result
