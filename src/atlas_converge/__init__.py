# src/atlas_converge/__init__.py
"""
Atlas Converge — engine de convergência de estado desejado para hosts.

Um conjunto de recursos declarados (chaves de registro, regras de firewall,
pacotes, políticas de segurança, ações de script) é convergido por
providers que implementam o protocolo Test → Set → Test. Recursos já
conformes não são tocados; recursos com drift são corrigidos e verificados.

Arquitetura em alto nível:
    - core.resources    → tipos, RunContext, protocolo de provider e registry
    - core.declarations → leitura e validação estrutural do documento de declarações
    - core.variables    → resolução única de variáveis externas
    - core.engine       → grafo de declarações, planner e executor
    - core.report       → RunReport e status agregado da run
    - core.traceability → Manifest e Event Log para auditoria
    - providers         → providers embutidos (File, ScriptAction)
    - report            → relatório Markdown da run
    - cli               → comandos `plan` e `apply`

Limites explícitos:
    - Não executa recursos em paralelo
    - Não faz rollback de mudanças já aplicadas
    - Não mantém estado entre runs
"""

__version__ = "0.1.0"
