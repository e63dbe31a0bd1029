# src/atlas_deploy/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Deploy.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, a resolução, a atualização e a persistência da
configuração de produção.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Falhas durante o *load* nunca chegam ao chamador (fallback para defaults)
    - Falhas durante a *persistência* são sempre propagadas

Responsabilidades do módulo:
    - Expressar falhas estruturais de configuração (formato, raiz, tipos)
    - Expressar violações de invariantes da árvore de configuração
    - Expressar falhas fatais de persistência

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa resultado de validação semântica
      (validação é report-only e nunca levanta)

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de renderizadores de artefatos

Este módulo existe para garantir clareza,
consistência e previsibilidade no tratamento de erros de configuração.
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Atlas Deploy.

    Todas as exceções levantadas durante carregamento, resolução,
    atualização e persistência da configuração devem herdar desta classe.

    Limites explícitos:
        - Não representa falha de validação semântica
        - Não representa falha de renderização de artefato
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado.

    Formatos suportados (v1):
        - JSON (.json)
        - YAML (.yaml, .yml)

    Limites explícitos:
        - Não tenta inferir formato por conteúdo
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz do arquivo persistido
    não é um mapa chave-valor (`dict`).
    """


class ConfigParseError(ConfigError):
    """Falha ao decodificar ou parsear o arquivo de configuração (JSON/YAML)."""


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito estrutural durante o deep-merge.

    Exemplo de conflito:
        - base:     {"security": {"ssl": {...}}}
        - override: {"security": "disabled"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidConfigValueError(ConfigError):
    """
    Exceção levantada quando um valor não respeita o tipo declarado
    na árvore de configuração (chave desconhecida, chave ausente,
    tipo escalar incorreto, valor de enum fora do domínio).
    """


class ConfigInvariantError(ConfigError):
    """
    Exceção levantada quando uma atualização produziria uma árvore
    que viola os invariantes da configuração de produção.

    Atributos:
        violations: lista das violações encontradas.

    Decisões arquiteturais:
        - A atualização é rejeitada antes de qualquer mutação de estado
    """

    def __init__(self, violations):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "config invariant violated")


class ConfigPersistError(ConfigError):
    """
    Exceção levantada quando a persistência da configuração falha
    (criação de diretório, escrita do arquivo ou do checksum).

    Decisões arquiteturais:
        - É a única falha fatal do subsistema
        - O estado em memória NÃO é revertido; o chamador deve tratar
          a configuração como "alterada em memória, mas não durável"
    """


class ConfigNotInitializedError(ConfigError):
    """O `ConfigManager` foi consultado antes de `init()`."""
