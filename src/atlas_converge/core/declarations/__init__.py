"""Atlas Converge — Declarations (core).

Componentes canônicos para o **documento de declarações v1**:
 - parsing (YAML/JSON)
 - validação estrutural (recursos e variáveis externas)
 - hashing canônico (rastreabilidade)
"""

from .loader import load_declarations, load_document  # noqa: F401
from .schema import DeclarationSet, parse_declarations  # noqa: F401
