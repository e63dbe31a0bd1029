# src/atlas_deploy/core/config/manager.py
"""
ConfigManager — fonte única da configuração de produção em runtime.

Responsabilidades:
    - executar o load inicial (uma única vez, explicitamente via `init`)
    - expor a árvore corrente (imutável)
    - aplicar updates parciais com deep-merge e persistir com checksum
    - validar e renderizar artefatos a partir de um snapshot consistente

Decisões arquiteturais:
    - Não há singleton de módulo: a instância é passada por referência
    - Update (escrita + checksum) e snapshots de renderização compartilham
      um único `threading.RLock`
    - Falha de persistência não desfaz o estado em memória

Limites explícitos:
    - Não aplica artefatos em nenhum orquestrador
    - Não observa o arquivo em disco após o load inicial
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ...artifacts.export import ArtifactBundle, export_artifacts
from ...artifacts.registry import render_artifact
from ..events import EventLog
from .errors import ConfigNotInitializedError, ConfigPersistError
from .integrity import IntegrityVerifier
from .loader import LoadResult, apply_overlay, load_config, resolve_config_path, serialize_config
from .schema import ConfigTree
from .validator import DEFAULT_CACHE_URL_ENV, ValidationReport, validate_config


_SOURCE = "config.manager"


class ConfigManager:
    """Mantém a árvore de configuração corrente e coordena load, update e render."""

    def __init__(
        self,
        *,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        cache_url_env: str = DEFAULT_CACHE_URL_ENV,
    ):
        self.environ = environ
        self.config_path = Path(config_path) if config_path is not None else resolve_config_path(environ)
        self.cache_url_env = cache_url_env
        self.events = EventLog()
        self.verifier = IntegrityVerifier.for_config(self.config_path, events=self.events)
        self.load_result: Optional[LoadResult] = None

        self._lock = threading.RLock()
        self._config: Optional[ConfigTree] = None

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def init(self) -> ConfigTree:
        """Executa o load inicial. Chamadas repetidas devolvem a árvore já carregada."""
        with self._lock:
            if self._config is None:
                self.load_result = load_config(
                    path=self.config_path,
                    environ=self.environ,
                    verifier=self.verifier,
                    events=self.events,
                )
                self._config = self.load_result.config
            return self._config

    @property
    def initialized(self) -> bool:
        return self._config is not None

    @property
    def warnings(self) -> List[str]:
        return self.events.all_warnings()

    def get_config(self) -> ConfigTree:
        with self._lock:
            if self._config is None:
                raise ConfigNotInitializedError("ConfigManager.init() must be called before get_config()")
            return self._config

    # -----------------------------
    # Update & persist
    # -----------------------------
    def update_config(self, partial: Dict[str, Any]) -> ConfigTree:
        """
        Aplica `partial` sobre a árvore corrente e persiste o resultado.

        Raises:
            ConfigNotInitializedError: antes de `init`.
            ConfigTypeConflictError / InvalidConfigValueError: overlay inválido
                (estado intocado).
            ConfigInvariantError: árvore resultante viola invariantes
                (estado intocado).
            ConfigPersistError: falha ao gravar arquivo ou checksum
                (estado em memória já substituído).
        """
        with self._lock:
            updated = apply_overlay(self.get_config(), partial)
            self._config = updated
            self._persist(updated)
            return updated

    def _persist(self, config: ConfigTree) -> None:
        raw = serialize_config(config, self.config_path)
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_bytes(raw)
        except OSError as e:
            self.events.log(source=_SOURCE, level="error", message=f"Falha ao persistir {self.config_path}: {e}")
            raise ConfigPersistError(f"Failed to write config {self.config_path}: {e}") from e

        self.verifier.record(raw)
        self.events.log(source=_SOURCE, level="info", message=f"Configuração persistida em {self.config_path}")

    # -----------------------------
    # Validation & rendering
    # -----------------------------
    def validate_config(self) -> ValidationReport:
        return validate_config(self.get_config(), environ=self.environ, cache_url_env=self.cache_url_env)

    def render(self, target: str) -> str:
        with self._lock:
            snapshot = self.get_config()
        return render_artifact(target, snapshot)

    def generate_kubernetes_manifest(self) -> str:
        return self.render("kubernetes")

    def generate_docker_compose(self) -> str:
        return self.render("compose")

    def generate_nginx_config(self) -> str:
        return self.render("nginx")

    def generate_prometheus_config(self) -> str:
        return self.render("prometheus")

    def export_artifacts(self, out_dir: Union[str, Path]) -> ArtifactBundle:
        with self._lock:
            snapshot = self.get_config()
        bundle = export_artifacts(snapshot, out_dir)
        self.events.log(
            source=_SOURCE,
            level="info",
            message=f"Artefatos exportados em {bundle.out_dir}",
            config_hash=bundle.config_hash,
        )
        return bundle
