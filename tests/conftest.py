# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Deploy.

Este módulo define fixtures reutilizáveis que fornecem:
- um ambiente de variáveis vazio (defaults literais)
- caminhos de configuração isolados em `tmp_path`
- a árvore de configuração padrão já materializada
- um predicado de existência de arquivo controlado pelo teste

Decisões arquiteturais:
    - O ambiente é sempre injetado como mapeamento; `os.environ` nunca é mutado
    - Todo I/O acontece dentro de `tmp_path`
    - Imports do pacote são feitos de forma lazy nas fixtures que
      materializam objetos, para mensagens de erro mais claras

Invariantes:
    - Fixtures são determinísticas e seguras para execução em paralelo
    - Nenhuma fixture escreve fora de `tmp_path`
"""

import pytest


@pytest.fixture
def empty_env() -> dict:
    """Ambiente sem nenhuma variável: todos os campos assumem o default literal."""
    return {}


@pytest.fixture
def config_path(tmp_path):
    """Caminho (ainda inexistente) do arquivo persistido, em JSON."""
    return tmp_path / "etc" / "production.json"


@pytest.fixture
def default_tree(empty_env):
    from atlas_deploy.core.config.env import defaults

    return defaults(empty_env)


@pytest.fixture
def tree_with(default_tree):
    """
    Fábrica de árvores derivadas dos defaults.

    Aplica um overlay parcial sem checar invariantes, para que testes do
    validador e dos renderizadores possam construir árvores arbitrárias.
    """
    from atlas_deploy.core.config.merge import deep_merge
    from atlas_deploy.core.config.schema import ConfigTree

    def _make(overlay: dict):
        return ConfigTree.from_dict(deep_merge(default_tree.to_dict(), overlay))

    return _make


@pytest.fixture
def all_paths_exist():
    return lambda path: True
