# src/atlas_converge/providers/builtin.py
"""
Providers embutidos do Atlas Converge.

São providers de referência, independentes de plataforma, usados para
exercitar o engine de ponta a ponta (CLI, testes, exemplos). Providers
específicos de host (registro, firewall, pacotes, políticas de segurança)
ficam fora deste pacote e são carregados por caminho de import
(`ResourceRegistry.register_from_path`).

Tipos fornecidos:
    - File:         conteúdo/presença de um arquivo de texto
    - ScriptAction: comandos de shell para Test/Set/Get

Todos seguem o protocolo Test → Set → Test: `test` nunca altera o host,
`set` altera e sinaliza falha levantando exceção.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from atlas_converge.core.exceptions import ProviderError
from atlas_converge.core.resources.context import RunContext
from atlas_converge.core.resources.registry import ResourceRegistry
from atlas_converge.core.resources.types import ResourceInstance


_ENSURE_VALUES = ("present", "absent")


def _require(instance: ResourceInstance, key: str) -> Any:
    value = instance.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ProviderError(
            message=f"missing required property: {key}",
            details={"resource": instance.name, "property": key},
            hint=f"Declare `{key}` em properties do recurso.",
        )
    return value


class FileProvider:
    """
    Garante a presença (e opcionalmente o conteúdo) de um arquivo.

    Propriedades:
        - path (str): caminho do arquivo (obrigatório)
        - content (str): conteúdo exato desejado (opcional; ausente = só presença)
        - ensure ("present" | "absent"): default "present"
    """

    type_name = "File"

    def _ensure(self, instance: ResourceInstance) -> str:
        ensure = instance.get("ensure", "present")
        if ensure not in _ENSURE_VALUES:
            raise ProviderError(
                message=f"invalid ensure value: {ensure}",
                details={"resource": instance.name, "ensure": ensure, "allowed": list(_ENSURE_VALUES)},
            )
        return ensure

    def test(self, instance: ResourceInstance, ctx: RunContext) -> bool:
        path = Path(_require(instance, "path"))
        if self._ensure(instance) == "absent":
            return not path.exists()

        if not path.is_file():
            return False
        content = instance.get("content")
        if content is None:
            return True
        return path.read_text(encoding="utf-8") == str(content)

    def set(self, instance: ResourceInstance, ctx: RunContext) -> None:
        path = Path(_require(instance, "path"))
        if self._ensure(instance) == "absent":
            if path.exists():
                path.unlink()
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        content = instance.get("content")
        if content is None:
            path.touch(exist_ok=True)
        else:
            path.write_text(str(content), encoding="utf-8")

    def get(self, instance: ResourceInstance, ctx: RunContext) -> Mapping[str, Any]:
        path = Path(_require(instance, "path"))
        if not path.is_file():
            return {"path": str(path), "exists": False}
        return {
            "path": str(path),
            "exists": True,
            "content": path.read_text(encoding="utf-8"),
        }


class ScriptActionProvider:
    """
    Recurso definido por comandos de shell.

    Propriedades:
        - test_command (str): exit code 0 = conforme. Ausente = sempre drift
          (ação executada em toda run; o post-check também reporta drift e o
          recurso termina FAILED)
        - set_command (str): aplica o estado desejado (obrigatório); exit code
          diferente de 0 é falha
        - get_command (str): opcional, stdout registrado como estado atual
        - timeout_seconds (number): limite de cada comando (opcional)
    """

    type_name = "ScriptAction"

    def _run(self, instance: ResourceInstance, command: str) -> subprocess.CompletedProcess:
        timeout = instance.get("timeout_seconds")
        return subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            timeout=float(timeout) if timeout is not None else None,
        )

    def test(self, instance: ResourceInstance, ctx: RunContext) -> bool:
        command = instance.get("test_command")
        if not command:
            return False
        return self._run(instance, str(command)).returncode == 0

    def set(self, instance: ResourceInstance, ctx: RunContext) -> None:
        command = str(_require(instance, "set_command"))
        result = self._run(instance, command)
        if result.returncode != 0:
            raise ProviderError(
                message=(result.stderr or "").strip() or f"set_command exited with code {result.returncode}",
                details={
                    "resource": instance.name,
                    "returncode": result.returncode,
                    "stdout": (result.stdout or "").strip(),
                },
                hint="Verifique o comando de Set e o estado do host.",
            )

    def get(self, instance: ResourceInstance, ctx: RunContext) -> Mapping[str, Any]:
        command = instance.get("get_command")
        if not command:
            return {}
        result = self._run(instance, str(command))
        return {"returncode": result.returncode, "stdout": (result.stdout or "").strip()}


BUILTIN_PROVIDERS: Dict[str, type] = {
    FileProvider.type_name: FileProvider,
    ScriptActionProvider.type_name: ScriptActionProvider,
}


def default_registry(registry: Optional[ResourceRegistry] = None) -> ResourceRegistry:
    """Registry (não congelado) com os providers embutidos registrados."""
    registry = registry if registry is not None else ResourceRegistry()
    for type_name, cls in BUILTIN_PROVIDERS.items():
        registry.register(type_name, cls())
    return registry
