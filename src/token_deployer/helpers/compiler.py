"""
Solidity compilation through py-solc-x.

The builder assembles a solc standard-JSON input from the contract source and
every file it imports (resolved through a callback, OpenZeppelin on disk by
default), compiles it, and returns the ABI and creation bytecode. The same
standard-JSON input is reused for explorer verification so both see the exact
same sources and settings.
"""
from __future__ import annotations

import json
import logging
import os
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from solcx import compile_standard, get_installed_solc_versions, install_solc
from solcx.exceptions import SolcError

from ..errors import CompileError

logger = logging.getLogger(__name__)

__all__ = [
    "CompiledContract",
    "SolidityBuilder",
    "ImportResolver",
    "default_import_resolver",
    "SOLC_VERSION",
    "CONTRACT_NAME",
]

SOLC_VERSION = "0.8.20"
SOLC_LONG_VERSION = "v0.8.20+commit.a1b79de6"
CONTRACT_NAME = "ERC20Token"
OPTIMIZER_RUNS = 200
EVM_VERSION = "paris"

IMPORT_RE = re.compile(r"""^\s*import\s+(?:[^;]*?\bfrom\s+)?["']([^"']+)["']""", re.MULTILINE)

ImportResolver = Callable[[str], str]


@dataclass(frozen=True)
class CompiledContract:
    name: str
    abi: list[dict[str, Any]]
    bytecode: str
    standard_json: dict[str, Any]


def _openzeppelin_roots() -> list[Path]:
    roots = []
    env_path = os.getenv("OPENZEPPELIN_PATH")
    if env_path:
        roots.append(Path(env_path))
    roots.append(Path("node_modules"))
    roots.append(Path("lib") / "openzeppelin-contracts")
    return roots


def default_import_resolver(import_path: str) -> str:
    """Resolve ``@openzeppelin/...`` imports from disk.

    Lookup order: OPENZEPPELIN_PATH (the directory holding ``@openzeppelin``),
    ``node_modules/``, then a Foundry style ``lib/openzeppelin-contracts``.
    """
    if not import_path.startswith("@openzeppelin/"):
        raise FileNotFoundError(f"File not found: {import_path}")
    candidates = []
    for root in _openzeppelin_roots():
        candidates.append(root / import_path)
        if root.name == "openzeppelin-contracts":
            # lib/openzeppelin-contracts/contracts/... for @openzeppelin/contracts/...
            candidates.append(root / import_path.split("/", 1)[1])
    for candidate in candidates:
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8")
    raise FileNotFoundError(f"File not found: {import_path}")


def _resolve_import_path(importer: str, import_path: str) -> str:
    if import_path.startswith("./") or import_path.startswith("../"):
        return posixpath.normpath(posixpath.join(posixpath.dirname(importer), import_path))
    return import_path


class SolidityBuilder:
    """Compile a single Solidity entry file with its import closure."""

    def __init__(
        self,
        solc_version: str = SOLC_VERSION,
        resolver: ImportResolver = default_import_resolver,
        optimize_runs: int = OPTIMIZER_RUNS,
        evm_version: str = EVM_VERSION,
        install: bool = True,
    ):
        self.solc_version = solc_version
        self.resolver = resolver
        self.optimize_runs = optimize_runs
        self.evm_version = evm_version
        self.install = install

    def ensure_solc(self) -> None:
        installed = {str(v) for v in get_installed_solc_versions()}
        if self.solc_version in installed:
            return
        if not self.install:
            raise CompileError(f"solc {self.solc_version} is not installed")
        logger.info("Installing solc %s...", self.solc_version)
        install_solc(self.solc_version)

    def collect_sources(self, entry_name: str, source: str) -> dict[str, dict[str, str]]:
        """Walk the import graph starting at ``entry_name``.

        Returns the ``sources`` section of a standard-JSON input.

        Raises:
            CompileError: If an import cannot be resolved.
        """
        sources: dict[str, dict[str, str]] = {entry_name: {"content": source}}
        pending = [entry_name]
        while pending:
            current = pending.pop()
            for raw_import in IMPORT_RE.findall(sources[current]["content"]):
                path = _resolve_import_path(current, raw_import)
                if path in sources:
                    continue
                try:
                    content = self.resolver(path)
                except (FileNotFoundError, OSError) as exc:
                    raise CompileError(f"Cannot resolve import {path} (from {current}): {exc}") from None
                sources[path] = {"content": content}
                pending.append(path)
        return sources

    def standard_json_input(self, entry_name: str, source: str) -> dict[str, Any]:
        return {
            "language": "Solidity",
            "sources": self.collect_sources(entry_name, source),
            "settings": {
                "optimizer": {"enabled": True, "runs": self.optimize_runs},
                "evmVersion": self.evm_version,
                "outputSelection": {"*": {"*": ["abi", "evm.bytecode.object"]}},
            },
        }

    def compile(self, entry_name: str, source: str, contract_name: str = CONTRACT_NAME) -> CompiledContract:
        """Compile ``source`` and return the named contract's ABI and bytecode.

        Warnings are logged; any error-severity diagnostic raises CompileError.
        """
        input_json = self.standard_json_input(entry_name, source)
        self.ensure_solc()

        logger.info("Compiling %s with solc %s...", contract_name, self.solc_version)
        try:
            output = compile_standard(input_json, solc_version=self.solc_version)
        except SolcError as exc:
            diagnostics = _diagnostics_from_solc_error(exc)
            raise CompileError("Compilation failed:\n" + "\n".join(diagnostics), diagnostics) from None

        return self._extract(output, input_json, entry_name, contract_name)

    def _extract(
        self,
        output: dict[str, Any],
        input_json: dict[str, Any],
        entry_name: str,
        contract_name: str,
    ) -> CompiledContract:
        diagnostics = output.get("errors") or []
        errors = [d for d in diagnostics if d.get("severity") == "error"]
        for warning in (d for d in diagnostics if d.get("severity") != "error"):
            logger.debug("solc %s: %s", warning.get("severity"), warning.get("formattedMessage") or warning.get("message"))
        if errors:
            messages = [e.get("formattedMessage") or e.get("message", "") for e in errors]
            raise CompileError("Compilation failed:\n" + "\n".join(messages), messages)

        try:
            contract = output["contracts"][entry_name][contract_name]
        except KeyError:
            raise CompileError(f"Could not find {contract_name} in compiled output of {entry_name}") from None

        bytecode = contract["evm"]["bytecode"]["object"]
        if not bytecode:
            raise CompileError(f"{contract_name} compiled to empty bytecode (abstract contract?)")
        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode

        logger.info("Contract compiled successfully (%d bytes)", (len(bytecode) - 2) // 2)
        return CompiledContract(
            name=contract_name,
            abi=contract["abi"],
            bytecode=bytecode,
            standard_json=input_json,
        )

    def compile_file(self, path: str | Path, contract_name: str = CONTRACT_NAME) -> CompiledContract:
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CompileError(f"Cannot read contract source {path}: {exc}") from None
        return self.compile(path.name, source, contract_name)


def _diagnostics_from_solc_error(exc: SolcError) -> list[str]:
    stdout = getattr(exc, "stdout_data", None)
    if stdout:
        try:
            data = json.loads(stdout)
        except ValueError:
            data = None
        if isinstance(data, dict):
            messages = [
                e.get("formattedMessage") or e.get("message", "")
                for e in data.get("errors", [])
                if e.get("severity") == "error"
            ]
            if messages:
                return messages
    return [str(exc)]
