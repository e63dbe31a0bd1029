# src/atlas_deploy/core/__init__.py
"""
Core do Atlas Deploy.

Componentes:
    - config → resolução, verificação, validação e gestão da configuração
    - events → EventLog (eventos estruturados + logger `atlas_deploy`)
    - errors → DeployIssuePayload e catálogo de códigos estáveis

Princípios fundamentais:
    - Nenhuma decisão silenciosa: fallback sempre gera warning
    - O boot de produção nunca é bloqueado por um arquivo corrompido
"""
