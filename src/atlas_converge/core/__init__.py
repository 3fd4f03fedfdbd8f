# src/atlas_converge/core/__init__.py
"""
Core do Atlas Converge.

Implementação canônica e independente de adapters (CLI, relatórios)
do fluxo de convergência:

    declarações → variáveis → grafo validado → plano → execução → RunReport

Componentes principais:
    - config       → resolução de configuração do engine (merge, validação, hashing)
    - resources    → ResourceInstance, Outcome, RunContext, Provider e registry
    - declarations → documento de declarações v1 (YAML/JSON)
    - engine       → Declaration Graph, Topological Scheduler e Convergence Executor
    - traceability → Manifest e Event Log

Princípios fundamentais:
    - Erros de validação e configuração são fatais e ocorrem antes de qualquer mutação
    - Falhas de recurso nunca interrompem ramos independentes (salvo fail_fast)
    - A mesma entrada produz sempre o mesmo plano
"""
