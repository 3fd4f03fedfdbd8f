# src/atlas_converge/core/config/__init__.py

"""
Camada de configuração do Atlas Converge.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar estruturalmente e identificar a configuração do engine
de convergência.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Validação das opções do engine (fail_fast, timeout_seconds, capture_drift)
    - Geração de hash canônico para rastreabilidade no Manifest

Princípios fundamentais:
    - Configuração não contém declarações de recursos
    - Nenhuma heurística implícita durante merge
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não resolve variáveis externas (responsabilidade de `core.variables`)
    - Não executa convergência
"""

from .errors import (  # noqa: F401
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidEngineOptionError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash  # noqa: F401
from .loader import DEFAULT_CONFIG, load_config, validate_engine_config  # noqa: F401
from .merge import deep_merge  # noqa: F401
