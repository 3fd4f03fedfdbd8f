# src/atlas_converge/core/config/loader.py
"""
Loader canônico de configuração do Atlas Converge.

A configuração efetiva do engine é resolvida a partir de:
    - `DEFAULT_CONFIG` embutido (sempre presente)
    - um arquivo de defaults (opcional; quando informado, deve existir)
    - um arquivo local de overrides (opcional; ignorado se ausente)

Opções reconhecidas na seção `engine`:
    - fail_fast (bool): interrompe a run após a primeira falha (default: false)
    - timeout_seconds (number | null): limite da run, verificado apenas
      entre recursos (default: null)
    - capture_drift (bool): chama `get` do provider após Test=False para
      registrar o estado atual (default: true)

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - Opções inválidas do engine são erro fatal antes da run
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidEngineOptionError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "fail_fast": False,
        "timeout_seconds": None,
        "capture_drift": True,
    },
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def validate_engine_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Valida os tipos das opções da seção `engine` e devolve a config inalterada."""
    engine = config.get("engine", {})
    if not isinstance(engine, dict):
        raise InvalidEngineOptionError(
            f"engine deve ser um mapping, recebido: {type(engine).__name__}"
        )

    for key in ("fail_fast", "capture_drift"):
        if key in engine and not isinstance(engine[key], bool):
            raise InvalidEngineOptionError(f"engine.{key} deve ser booleano")

    timeout = engine.get("timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise InvalidEngineOptionError("engine.timeout_seconds deve ser numérico ou null")
        if timeout <= 0:
            raise InvalidEngineOptionError("engine.timeout_seconds deve ser positivo")

    return config


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do engine.

    Política de resolução:
        - `DEFAULT_CONFIG` é sempre a base
        - O arquivo de defaults, quando informado, é obrigatório
        - O arquivo local é opcional e tem prioridade sobre os demais

    Args:
        defaults_path (Optional[str]): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults informado não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
        InvalidEngineOptionError: Se alguma opção do engine for inválida.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return validate_engine_config(effective)
