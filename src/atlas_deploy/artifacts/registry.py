"""
Registro de alvos de artefato.

Cada alvo tem um identificador estável, o nome de arquivo usado na
exportação e a função de renderização. A ordem de declaração é a ordem
canônica de exportação.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from atlas_deploy.core.config.schema import ConfigTree

from .compose import render_docker_compose
from .kubernetes import render_kubernetes_manifest
from .nginx import render_nginx_config
from .prometheus import render_prometheus_config


class UnknownArtifactTargetError(KeyError):
    """Alvo de artefato não registrado."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"unknown artifact target: {target!r} (known: {', '.join(ARTIFACT_TARGETS)})")

    def __str__(self) -> str:
        return str(self.args[0])


@dataclass(frozen=True)
class ArtifactTarget:
    target: str
    filename: str
    render: Callable[[ConfigTree], str]


ARTIFACT_TARGETS: Dict[str, ArtifactTarget] = {
    t.target: t
    for t in (
        ArtifactTarget("kubernetes", "deployment.yaml", render_kubernetes_manifest),
        ArtifactTarget("compose", "docker-compose.yml", render_docker_compose),
        ArtifactTarget("nginx", "nginx.conf", render_nginx_config),
        ArtifactTarget("prometheus", "prometheus.yml", render_prometheus_config),
    )
}


def list_targets() -> List[str]:
    return list(ARTIFACT_TARGETS)


def get_target(target: str) -> ArtifactTarget:
    try:
        return ARTIFACT_TARGETS[target]
    except KeyError as e:
        raise UnknownArtifactTargetError(target) from e


def render_artifact(target: str, config: ConfigTree) -> str:
    """Renderiza o artefato `target` para a árvore fornecida."""
    return get_target(target).render(config)
