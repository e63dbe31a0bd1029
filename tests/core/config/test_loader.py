# tests/core/config/test_loader.py
"""
Testes do loader da configuração de produção (load_config).

Este módulo valida a máquina de estados do load:
- DEFAULTS  → nenhum arquivo persistido
- PERSISTED → arquivo íntegro e válido, mesclado sobre os defaults
- FALLBACK  → qualquer falha no arquivo: defaults + warning, sem exceção

Decisões arquiteturais:
    - O boot de produção nunca é bloqueado por um arquivo corrompido
    - Falhas de load são reportadas como warnings no EventLog
    - Campos ausentes no arquivo mantêm os defaults

Invariantes:
    - load_config nunca levanta para arquivos inválidos
    - O resultado sempre contém uma árvore completa e tipada

Limites explícitos:
    - Não valida persistência (coberta pelos testes do ConfigManager)
    - Não valida regras semânticas (cobertas pelos testes do validador)
"""

import json
from pathlib import Path

import pytest

try:
    from atlas_deploy.core.config.loader import (
        LoadOutcome,
        load_config,
        parse_document,
        resolve_config_path,
        serialize_config,
    )
    from atlas_deploy.core.config.errors import (
        ConfigParseError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
    from atlas_deploy.core.config.integrity import IntegrityVerifier
    from atlas_deploy.core.events import EventLog
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader e suas exceções tipadas estejam disponíveis.

    Falha imediatamente, com mensagem descritiva, quando `loader`,
    `errors`, `integrity` ou `events` não podem ser importados, evitando
    falhas indiretas nos testes.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/atlas_deploy/core/config/loader.py (load_config)\n"
            "- src/atlas_deploy/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _write_with_checksum(path: Path, payload: dict) -> bytes:
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = json.dumps(payload).encode("utf-8")
    path.write_bytes(raw)
    IntegrityVerifier.for_config(path).record(raw)
    return raw


def test_missing_file_uses_defaults(config_path, empty_env):
    _require_imports()
    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.DEFAULTS
    assert result.warnings == []
    assert result.config.environment.name == "icepaca-production"


def test_persisted_overlay_is_merged_over_defaults(config_path, empty_env):
    """
    Verifica que campos presentes no arquivo vencem os defaults e que
    campos ausentes mantêm o default.
    """
    _require_imports()
    _write_with_checksum(
        config_path,
        {"deployment": {"scaling": {"horizontal": {"max_replicas": 20}}}, "environment": {"name": "shop"}},
    )

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.PERSISTED
    assert result.config.deployment.scaling.horizontal.max_replicas == 20
    assert result.config.deployment.scaling.horizontal.min_replicas == 3
    assert result.config.environment.name == "shop"
    assert result.config.environment.domain == "icepaca.com"


def test_persisted_without_checksum_is_accepted(config_path, empty_env):
    _require_imports()
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({"environment": {"name": "first-run"}}), encoding="utf-8")

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.PERSISTED
    assert result.config.environment.name == "first-run"


def test_yaml_file_is_loaded_by_suffix(tmp_path, empty_env):
    _require_imports()
    path = tmp_path / "production.yaml"
    path.write_text("monitoring:\n  metrics:\n    scrape_interval: 30\n", encoding="utf-8")

    result = load_config(path=path, environ=empty_env)

    assert result.outcome is LoadOutcome.PERSISTED
    assert result.config.monitoring.metrics.scrape_interval == 30


def test_corrupted_checksum_falls_back_with_warning(config_path, empty_env):
    """
    Verifica o caminho de fallback por falha de integridade.

    Invariantes:
        - Nenhuma exceção chega ao chamador
        - A árvore efetiva é a dos defaults
        - Um warning é registrado no EventLog
    """
    _require_imports()
    _write_with_checksum(config_path, {"environment": {"name": "tampered"}})
    Path(str(config_path) + ".checksum").write_text("0" * 64, encoding="utf-8")

    events = EventLog()
    result = load_config(path=config_path, environ=empty_env, events=events)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.config.environment.name == "icepaca-production"
    assert len(result.warnings) == 1
    assert "integridade" in result.warnings[0]
    assert events.all_warnings() == result.warnings


def test_edited_file_is_rejected(config_path, empty_env):
    _require_imports()
    _write_with_checksum(config_path, {"environment": {"name": "original"}})
    config_path.write_text(json.dumps({"environment": {"name": "edited"}}), encoding="utf-8")

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.config.environment.name == "icepaca-production"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"environment": {"unknown_field": 1}}',
        '{"deployment": {"scaling": {"horizontal": {"min_replicas": 50}}}}',
        '{"security": {"ssl": true}}',
    ],
)
def test_invalid_file_falls_back_without_raising(config_path, empty_env, content):
    _require_imports()
    config_path.parent.mkdir(parents=True)
    config_path.write_text(content, encoding="utf-8")

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.warnings


def test_parse_document_errors():
    _require_imports()
    with pytest.raises(UnsupportedConfigFormatError):
        parse_document(b"{}", Path("production.toml"))
    with pytest.raises(InvalidConfigRootTypeError):
        parse_document(b"- a\n- b\n", Path("production.yml"))
    with pytest.raises(ConfigParseError):
        parse_document(b"\xff\xfe", Path("production.json"))
    assert parse_document(b"", Path("production.yaml")) == {}


def test_serialize_config_is_canonical_json(default_tree):
    _require_imports()
    raw = serialize_config(default_tree, "production.json")

    assert raw.endswith(b"\n")
    assert raw == serialize_config(default_tree, "production.json")
    assert json.loads(raw.decode("utf-8")) == default_tree.to_dict()
    assert raw.decode("utf-8").startswith('{\n  "database"')


def test_resolve_config_path():
    _require_imports()
    assert resolve_config_path({}) == Path("/etc/icepaca/production.json")
    assert resolve_config_path({"PRODUCTION_CONFIG_PATH": "/tmp/x.yaml"}) == Path("/tmp/x.yaml")


def test_unreadable_config_path_falls_back(config_path, empty_env, monkeypatch):
    """
    Verifica que erro de permissão no arquivo persistido leva ao fallback.

    Invariantes:
        - Nenhum OSError chega ao chamador
        - A árvore efetiva é a dos defaults, com warning
    """
    _require_imports()
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({"environment": {"name": "locked"}}), encoding="utf-8")

    real_read_bytes = Path.read_bytes

    def _denied(self):
        if self == config_path:
            raise PermissionError(13, "Permission denied", str(self))
        return real_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", _denied)

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.config.environment.name == "icepaca-production"
    assert "Permission denied" in result.warnings[0]


def test_directory_in_place_of_config_falls_back(config_path, empty_env):
    _require_imports()
    config_path.mkdir(parents=True)

    result = load_config(path=config_path, environ=empty_env)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.warnings


@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_deeply_nested_document_falls_back(tmp_path, empty_env, suffix):
    # aninhamento patológico estoura a recursão do parser
    _require_imports()
    path = tmp_path / f"production{suffix}"
    path.write_text("[" * 200000, encoding="utf-8")

    result = load_config(path=path, environ=empty_env)

    assert result.outcome is LoadOutcome.FALLBACK
    assert result.config.environment.name == "icepaca-production"


def test_deeply_nested_document_is_parse_error():
    _require_imports()
    with pytest.raises(ConfigParseError):
        parse_document(b"[" * 200000, Path("production.json"))
