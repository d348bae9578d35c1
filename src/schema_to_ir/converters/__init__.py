"""Output stage: serialized IR files.

The finished ServiceDefinition is handed to an external code generator as
a JSON or YAML file using the stable tagged-union encoding.

Example:
-------
    >>> from schema_to_ir.converters import IRWriter, load_ir_file
    >>> IRWriter().write(result.service, Path("storage.ir.json"))
    >>> load_ir_file(Path("storage.ir.json")) == result.service
    True

"""

from schema_to_ir.converters.ir_writer import IRReader, IRWriter, load_ir_file

__all__ = [
    "IRReader",
    "IRWriter",
    "load_ir_file",
]
