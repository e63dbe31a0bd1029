# src/atlas_deploy/core/events.py
"""
EventLog — log estruturado de eventos do Atlas Deploy.

Este módulo define o `EventLog`, a estrutura usada pelo subsistema de
configuração para registrar eventos de execução e warnings não fatais
(fallback para defaults, falha de integridade, persistência concluída).

Princípios fundamentais:
    - Eventos são dicionários estruturados e inspecionáveis
    - Warnings são agrupados por `source`
    - Todo evento também é encaminhado ao logger `atlas_deploy`,
      para que o processo hospedeiro os veja no seu pipeline de logs

Invariantes:
    - Eventos sempre incluem `source`, `level`, `message` e `timestamp`
    - A ordem de `events` reflete a ordem real de emissão

Limites explícitos:
    - Não persiste eventos em disco
    - Não é consultado pelos renderizadores (que são puros)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


logger = logging.getLogger("atlas_deploy")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class EventLog:
    """
    Registro ordenado de eventos e warnings de um componente.

    Campos:
    - events: log estruturado de eventos
    - warnings: mensagens de warning por source
    """

    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, source: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "source": source,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
        logger.log(_LEVELS.get(level, logging.INFO), "[%s] %s", source, message)

    def add_warning(self, *, source: str, message: str, **extra: Any) -> None:
        if source not in self.warnings:
            self.warnings[source] = []
        self.warnings[source].append(message)
        self.log(source=source, level="warning", message=message, **extra)

    def all_warnings(self) -> List[str]:
        """Warnings de todas as sources, na ordem das sources (estável)."""
        out: List[str] = []
        for source in sorted(self.warnings):
            out.extend(self.warnings[source])
        return out
