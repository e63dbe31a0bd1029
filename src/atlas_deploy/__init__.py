# src/atlas_deploy/__init__.py
"""
Atlas Deploy — configuração de produção e geração de artefatos de deploy.

Este pacote raiz define o namespace público do Atlas Deploy, um
subsistema que resolve a configuração de produção de um serviço web
(defaults por ambiente + arquivo persistido verificado por checksum) e
gera, a partir dessa fonte única, os artefatos de deploy.

Arquitetura em alto nível:
    - core.config → defaults, load com fallback, integridade, merge,
                    validação semântica e o ConfigManager
    - core.events → log estruturado de eventos e warnings
    - core.errors → payloads canônicos de problemas de configuração
    - artifacts   → renderizadores (Kubernetes, compose, nginx, Prometheus)
                    e exportação do bundle

Limites explícitos:
    - Não serve HTTP
    - Não aplica artefatos em nenhum orquestrador
    - Não gerencia segredos além de ler caminhos
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
