# src/atlas_deploy/core/config/hashing.py
"""
Hashing canônico do Atlas Deploy.

Este módulo concentra as duas formas de digest usadas pelo subsistema:

    - `sha256_hex(raw)`: digest dos bytes *exatos* de um arquivo
      (base do checksum sidecar e do índice de artefatos exportados)
    - `compute_config_hash(config)`: identidade estrutural de uma
      configuração, calculada sobre JSON canônico

Decisões arquiteturais:
    - O algoritmo é fixo (SHA-256)
    - O resultado é sempre hexadecimal minúsculo com 64 caracteres
    - Nenhuma informação de runtime participa do hash

Limites explícitos:
    - Não lê nem escreve arquivos
    - Não é um mecanismo de autenticação (não há chave secreta)
"""

import hashlib
import json
from typing import Any, Dict


def sha256_hex(raw: bytes) -> str:
    """Retorna o digest SHA-256 hexadecimal de `raw`, sem qualquer normalização."""
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError(f"sha256_hex requer bytes, recebido: {type(raw).__name__}")
    return hashlib.sha256(raw).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da forma em dicionário de uma configuração.

    Política de hashing (v1):
        - Serialização JSON canônica
        - Ordenação estável de chaves
        - Separadores compactos
        - Codificação UTF-8

    Invariantes:
        - Configurações estruturalmente equivalentes produzem o mesmo hash
        - O hash é independente da ordem original das chaves

    Args:
        config (Dict[str, Any]): Configuração em forma de dicionário.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return sha256_hex(canonical_json.encode("utf-8"))
