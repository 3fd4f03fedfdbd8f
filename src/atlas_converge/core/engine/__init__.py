# src/atlas_converge/core/engine/__init__.py
"""
Engine do Atlas Converge.

Este pacote contém a implementação responsável por **validar**,
**planejar** e **convergir** recursos declarados.

Componentes principais:
    - graph    → Declaration Graph (nomes únicos, dependências resolvidas, aciclicidade)
    - planner  → ordenação topológica determinística (Plan)
    - executor → Test → Set → Test por recurso, com propagação de falhas
    - engine   → fachada de uma run completa (variáveis + grafo + plano + execução)

Invariantes:
    - Recursos só são convergidos após suas dependências
    - Cada recurso recebe exatamente um Outcome por run
    - Dependentes de um recurso FAILED nunca são executados na mesma run

Limites explícitos:
    - Não define providers concretos
    - Não persiste resultados automaticamente
"""
