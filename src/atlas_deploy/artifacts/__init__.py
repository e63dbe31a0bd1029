# src/atlas_deploy/artifacts/__init__.py
"""
Geração de artefatos de deploy a partir da árvore de configuração.

Todos os renderizadores são funções puras: mesma árvore, mesmo texto.
"""
