"""
Exportação do bundle de artefatos de deploy (v1).

Escreve em `out_dir`, nesta ordem:
- os quatro artefatos renderizados (ver `registry.ARTIFACT_TARGETS`)
- `artifacts.json`: índice com o hash da configuração e o SHA-256 de cada arquivo

Invariantes:
- Mesma árvore => mesmos bytes em todos os arquivos, inclusive no índice
- O índice não carrega timestamps nem caminhos absolutos
- O digest registrado é o dos bytes exatamente escritos

Limites explícitos:
- Não aplica os artefatos (nenhuma chamada a kubectl/docker)
- Não remove arquivos pré-existentes em `out_dir`
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from atlas_deploy.core.config.hashing import compute_config_hash, sha256_hex
from atlas_deploy.core.config.schema import ConfigTree

from .registry import ARTIFACT_TARGETS


INDEX_FILENAME = "artifacts.json"
INDEX_FORMAT_VERSION = 1


@dataclass(frozen=True)
class ArtifactBundle:
    """Resultado de uma exportação: diretório, hash da config e arquivos escritos."""

    out_dir: Path
    config_hash: str
    files: Dict[str, Path] = field(default_factory=dict)
    sha256: Dict[str, str] = field(default_factory=dict)
    index_path: Path = Path(INDEX_FILENAME)

    def to_index(self) -> Dict[str, Any]:
        return {
            "format_version": INDEX_FORMAT_VERSION,
            "config_hash": self.config_hash,
            "artifacts": [
                {"target": target, "file": path.name, "sha256": self.sha256[target]}
                for target, path in self.files.items()
            ],
        }


def export_artifacts(config: ConfigTree, out_dir: Union[str, Path]) -> ArtifactBundle:
    """Renderiza todos os alvos registrados e grava o bundle em `out_dir`."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    files: Dict[str, Path] = {}
    digests: Dict[str, str] = {}
    for target, entry in ARTIFACT_TARGETS.items():
        raw = entry.render(config).encode("utf-8")
        path = out / entry.filename
        path.write_bytes(raw)
        files[target] = path
        digests[target] = sha256_hex(raw)

    bundle = ArtifactBundle(
        out_dir=out,
        config_hash=compute_config_hash(config.to_dict()),
        files=files,
        sha256=digests,
        index_path=out / INDEX_FILENAME,
    )

    index = json.dumps(bundle.to_index(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    bundle.index_path.write_bytes(index.encode("utf-8"))
    return bundle
