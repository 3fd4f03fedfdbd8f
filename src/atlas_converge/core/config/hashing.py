# src/atlas_converge/core/config/hashing.py
"""
Hashing canônico de configuração e declarações.

O hash gerado representa a identidade estrutural de uma entrada da run
(configuração efetiva ou conjunto de declarações) e é registrado em
`Manifest.inputs` para auditoria e comparação entre execuções.

Política de hashing (v1):
    - Serialização JSON canônica (sort_keys, separadores compactos, UTF-8)
    - Conjuntos (set/frozenset) são serializados como listas ordenadas
    - SHA-256, saída hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Mapping


def _default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"valor não serializável para hashing: {type(value).__name__}")


def canonical_hash(payload: Any) -> str:
    canonical_json = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_default,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_config_hash(config: Mapping[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do engine.

    Raises:
        TypeError: Se o objeto fornecido não for um mapping.
    """
    if not isinstance(config, Mapping):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return canonical_hash(dict(config))
