"""Write and read serialized IR files (JSON or YAML).

The file content is the plain-data encoding from
:mod:`schema_to_ir.ir.serialization`; the suffix of the path picks the
syntax.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from schema_to_ir.ir.serialization import IRDecodeError, service_from_dict, service_to_dict
from schema_to_ir.ir.service import ServiceDefinition

JSON_SUFFIXES = frozenset({".json"})
YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class IRWriter:
    """Write a ServiceDefinition to disk.

    Usage:
        writer = IRWriter()
        writer.write(service, Path("s3.ir.json"))

    Or for in-memory conversion:
        text = writer.dumps(service, "yaml")
    """

    def __init__(self, indent: int = 2) -> None:
        """Initialize the writer.

        Args:
        ----
            indent: Indentation used for JSON output.

        """
        self._indent = indent

    def write(self, service: ServiceDefinition, output_path: Path) -> None:
        """Write a service to a file; parent directories are created.

        Raises
        ------
            ValueError: If the suffix is neither JSON nor YAML.

        """
        text = self.dumps(service, _syntax(output_path))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")

    def dumps(self, service: ServiceDefinition, syntax: str = "json") -> str:
        """Encode a service as JSON or YAML text."""
        data = service_to_dict(service)
        if syntax == "yaml":
            return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        return json.dumps(data, indent=self._indent, ensure_ascii=False) + "\n"


class IRReader:
    """Read a ServiceDefinition back from disk.

    Usage:
        reader = IRReader()
        service = reader.read(Path("s3.ir.json"))
    """

    def read(self, input_path: Path) -> ServiceDefinition:
        """Read a serialized service.

        Raises
        ------
            FileNotFoundError: If the file doesn't exist.
            IRDecodeError: If the content is not a valid encoded service.

        """
        text = input_path.read_text(encoding="utf-8")
        return self.loads(text, _syntax(input_path))

    def loads(self, text: str, syntax: str = "json") -> ServiceDefinition:
        """Decode a service from JSON or YAML text."""
        data: Any
        try:
            data = yaml.safe_load(text) if syntax == "yaml" else json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise IRDecodeError(f"cannot parse {syntax}: {e}") from e
        return service_from_dict(data)


def load_ir_file(path: Path) -> ServiceDefinition:
    """Read a serialized IR file."""
    return IRReader().read(path)


def _syntax(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"
    raise ValueError(f"Unsupported IR file extension: {suffix}. Use .json, .yaml, or .yml")
