# src/atlas_deploy/core/config/integrity.py
"""
Verificação de integridade do arquivo de configuração persistido.

O checksum sidecar (`<config>.checksum`) contém o SHA-256 hexadecimal
dos bytes exatos do arquivo de configuração no último save bem-sucedido.
Ele detecta escritas parciais e edições manuais que contornaram o
`ConfigManager`.

Decisões arquiteturais:
    - Ausência de checksum significa "primeira execução": a verificação passa
    - Falha de leitura do checksum é tratada como verificação falha
      (fail closed), com warning, nunca como erro fatal
    - O digest é calculado sobre os bytes lidos do disco, nunca sobre
      uma re-serialização

Limites explícitos:
    - Não autentica o conteúdo: quem tem acesso de escrita ao filesystem
      pode regravar arquivo e checksum juntos
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..events import EventLog
from .errors import ConfigPersistError
from .hashing import sha256_hex


CHECKSUM_SUFFIX = ".checksum"

_SOURCE = "config.integrity"


def checksum_path_for(config_path: Union[str, Path]) -> Path:
    """Caminho do sidecar: o caminho da configuração com o sufixo fixo anexado."""
    p = Path(config_path)
    return p.with_name(p.name + CHECKSUM_SUFFIX)


class IntegrityVerifier:
    """Calcula e confere o checksum sidecar de um arquivo de configuração."""

    def __init__(self, checksum_path: Union[str, Path], events: Optional[EventLog] = None):
        self.checksum_path = Path(checksum_path)
        self.events = events if events is not None else EventLog()

    @classmethod
    def for_config(cls, config_path: Union[str, Path], events: Optional[EventLog] = None) -> "IntegrityVerifier":
        return cls(checksum_path_for(config_path), events=events)

    def verify(self, raw: bytes) -> bool:
        """
        Confere `raw` contra o checksum registrado.

        Returns:
            bool: True se não há baseline ou se os digests coincidem.
        """
        try:
            expected = self.checksum_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return True
        except (OSError, UnicodeDecodeError) as e:
            self.events.add_warning(
                source=_SOURCE,
                message=f"Falha ao ler checksum {self.checksum_path}: {e}",
                checksum_path=str(self.checksum_path),
            )
            return False

        actual = sha256_hex(raw)
        return expected == actual

    def record(self, raw: bytes) -> None:
        """
        Sobrescreve o checksum com o digest de `raw`.

        Deve ser chamado logo após a escrita bem-sucedida de `raw` no
        arquivo de configuração.

        Raises:
            ConfigPersistError: Se o checksum não puder ser escrito.
        """
        digest = sha256_hex(raw)
        try:
            self.checksum_path.write_text(digest, encoding="utf-8")
        except OSError as e:
            raise ConfigPersistError(
                f"Falha ao gravar checksum em {self.checksum_path}: {e}"
            ) from e
