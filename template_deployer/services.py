"""
External collaborators: template store, compiler service, record store

Each collaborator is a Protocol the deployer depends on; the classes here are
reference implementations for local use and tests.
"""

import asyncio
import json
import logging
import re
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

import aiohttp
import solcx
from eth_typing import HexStr
from eth_utils import add_0x_prefix

from .exceptions import CompilationError, PersistenceError
from .models import CompiledContract, ContractTemplate, DeploymentRecord

logger = logging.getLogger(__name__)

CONTRACT_NAME_PATTERN = re.compile(r"contract\s+([a-zA-Z0-9_]+)")


# ==================== Protocols ====================

class TemplateStore(Protocol):
    async def get_template(self, template_id: str) -> Optional[ContractTemplate]:
        ...


class CompilerService(Protocol):
    async def compile(
        self, source_code: str, contract_name: Optional[str] = None
    ) -> CompiledContract:
        ...


class RecordStore(Protocol):
    async def save(self, record: DeploymentRecord) -> str:
        ...


# ==================== Template stores ====================

class InMemoryTemplateStore:
    """Template store backed by a dict"""

    def __init__(self, templates: Optional[List[ContractTemplate]] = None):
        self.templates: Dict[str, ContractTemplate] = {}
        for template in templates or []:
            self.add(template)

    def add(self, template: ContractTemplate) -> None:
        self.templates[template.id] = template

    async def get_template(self, template_id: str) -> Optional[ContractTemplate]:
        return self.templates.get(template_id)


class JsonTemplateStore:
    """
    Template store reading <directory>/<template id>.json

    Documents use the stored camelCase shape (sourceCode, contractName, ...).
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    async def get_template(self, template_id: str) -> Optional[ContractTemplate]:
        path = self.directory / f"{template_id}.json"
        if not path.is_file():
            return None

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        data.setdefault("id", template_id)
        return ContractTemplate.from_dict(data)


# ==================== Compilers ====================

def extract_contract_name(source_code: str) -> Optional[str]:
    """First `contract Name` declaration in a Solidity source"""
    match = CONTRACT_NAME_PATTERN.search(source_code or "")
    return match.group(1) if match else None


def _prefixed(bytecode: str) -> HexStr:
    return add_0x_prefix(HexStr(bytecode))


class HttpCompilerService:
    """
    Remote compiler reached over HTTP

    POSTs {"sourceCode", "contractName"} and expects
    {"success", "abi", "bytecode", "error"} back.
    """

    def __init__(self, url: str, timeout: float = 120):
        self.url = url
        self.timeout = timeout

    async def compile(
        self, source_code: str, contract_name: Optional[str] = None
    ) -> CompiledContract:
        payload = {
            "sourceCode": source_code,
            "contractName": contract_name or extract_contract_name(source_code),
        }

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(self.url, json=payload) as resp:
                    if resp.status != 200:
                        raise CompilationError(
                            f"Failed to compile contract: HTTP {resp.status} {resp.reason}"
                        )
                    result = await resp.json()
        except aiohttp.ClientError as exc:
            raise CompilationError(f"Failed to compile contract: {exc}") from exc

        if not result.get("success") or not result.get("abi") or not result.get("bytecode"):
            raise CompilationError(
                f"Compilation failed: {result.get('error') or 'Unknown error'}"
            )

        return CompiledContract(abi=result["abi"], bytecode=_prefixed(result["bytecode"]))


class SolcCompilerService:
    """Local compiler using py-solc-x"""

    def __init__(self, solc_version: str = "0.8.20", optimize_runs: int = 200):
        self.solc_version = solc_version
        self.optimize_runs = optimize_runs

    async def compile(
        self, source_code: str, contract_name: Optional[str] = None
    ) -> CompiledContract:
        return await asyncio.to_thread(self._compile, source_code, contract_name)

    def _compile(self, source_code: str, contract_name: Optional[str]) -> CompiledContract:
        try:
            solcx.install_solc(self.solc_version)
            compiled = solcx.compile_source(
                source_code,
                output_values=["abi", "bin"],
                solc_version=self.solc_version,
                optimize=True,
                optimize_runs=self.optimize_runs
            )
        except Exception as exc:
            raise CompilationError(f"Compilation failed: {exc}") from exc

        if not compiled:
            raise CompilationError("No contract output found")

        name = contract_name or extract_contract_name(source_code)
        key = f"<stdin>:{name}"
        interface = compiled.get(key) or next(iter(compiled.values()))

        if not interface.get("abi") or not interface.get("bin"):
            raise CompilationError("Failed to extract ABI or bytecode")
        return CompiledContract(abi=interface["abi"], bytecode=_prefixed(interface["bin"]))


async def ensure_compiled(
    template: ContractTemplate, compiler: Optional[CompilerService]
) -> ContractTemplate:
    """
    Return a template with deployable bytecode, compiling its source if needed

    Raises:
        CompilationError: when compilation is needed but impossible
    """
    if not template.needs_compilation:
        return template

    if compiler is None or not template.source_code:
        raise CompilationError(
            f"Template {template.id} needs compilation but no compiler or source is available"
        )

    logger.info("Template %s needs compilation, compiling contract...", template.id)
    compiled = await compiler.compile(template.source_code, template.contract_name)
    updated = replace(template, abi=compiled.abi, bytecode=compiled.bytecode)

    if updated.needs_compilation:
        raise CompilationError("Failed to compile contract. Please try again or contact support.")
    return updated


# ==================== Record stores ====================

class InMemoryRecordStore:
    """Record store keeping documents per collection"""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def save(self, record: DeploymentRecord) -> str:
        record_id = uuid.uuid4().hex
        self.collections.setdefault(record.collection, {})[record_id] = record.to_dict()
        return record_id

    def all(self, collection: Optional[str] = None) -> List[Dict[str, Any]]:
        if collection is not None:
            return list(self.collections.get(collection, {}).values())
        return [doc for docs in self.collections.values() for doc in docs.values()]


class JsonRecordStore:
    """Record store appending one JSON line per record to <directory>/<collection>.jsonl"""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    async def save(self, record: DeploymentRecord) -> str:
        record_id = uuid.uuid4().hex
        document = dict(record.to_dict(), id=record_id)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / f"{record.collection}.jsonl"
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(document, default=str) + "\n")
        except OSError as exc:
            raise PersistenceError(f"Failed to write {record.collection}: {exc}") from exc

        return record_id
