"""schema-to-ir: compile API schema documents into a provider-neutral resource IR.

This package provides tools for:
- Reading Smithy JSON AST, OpenAPI 3.0, Google Discovery, protobuf
  descriptor sets and reflection snapshots of compiled clients
- Classifying their operations into CRUD resources
- Producing one ServiceDefinition per document, with warnings for anything
  that had to be approximated

Quick Start:
    >>> from schema_to_ir.models import load_document
    >>> from schema_to_ir.convert import convert
    >>> from schema_to_ir.converters import IRWriter
    >>>
    >>> document = load_document(Path("storage-v1.json"))
    >>> result = convert(document, "discovery", "storage", "v1")
    >>> IRWriter().write(result.service, Path("storage.ir.json"))

Modules:
    ir: Intermediate Representation data structures and their encoding
    models: Pydantic models of the source documents, loading and detection
    adapters: Per-format operation enumeration and type resolution
    transform: Naming, classification and the shared pipeline
    validation: Issues, reports and IR invariant checks
    converters: IR file output
    cli: Command-line interface
"""

__version__ = "0.1.0"
