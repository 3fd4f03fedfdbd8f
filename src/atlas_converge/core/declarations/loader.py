"""Loader canônico de declarações (YAML/JSON).

Notas:
- YAML é preferencial, JSON é alternativo.
- O formato é inferido pela extensão do arquivo.
- Qualquer falha aqui é um erro de validação: nenhuma run começa.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from atlas_converge.core.exceptions import (
    DeclarationFormatError,
    UnsupportedDeclarationFormatError,
)

from .schema import DeclarationSet, parse_declarations


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Carrega o documento bruto de declarações.

    Raises:
        DeclarationFormatError: se o arquivo não existir, estiver vazio ou falhar no parsing.
        UnsupportedDeclarationFormatError: se a extensão não for suportada.
    """
    p = Path(path)
    if not p.exists():
        raise DeclarationFormatError(
            message=f"declaration file not found: {p}",
            details={"path": str(p)},
        )

    suffix = p.suffix.lower()
    if suffix not in {".yml", ".yaml", ".json"}:
        raise UnsupportedDeclarationFormatError(
            message=f"unsupported declaration format: {suffix}",
            details={"path": str(p), "suffix": suffix},
            hint="Use YAML (.yaml/.yml) ou JSON (.json).",
        )

    raw = p.read_text(encoding="utf-8")

    try:
        if suffix == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (yaml.YAMLError, ValueError) as e:
        raise DeclarationFormatError(
            message=str(e) or "failed to parse declaration document",
            details={"path": str(p)},
        ) from e

    if data is None:
        # YAML vazio -> None
        raise DeclarationFormatError(
            message="declaration document is empty",
            details={"path": str(p)},
        )

    return data


def load_declarations(path: Union[str, Path]) -> DeclarationSet:
    """Carrega e valida estruturalmente um documento de declarações."""
    return parse_declarations(load_document(path))
