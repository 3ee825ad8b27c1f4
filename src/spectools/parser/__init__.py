"""OpenAPI document parser -- parse text, resolve ``$ref`` pointers, enumerate operations.

This sub-package is the first half of the spectools pipeline: turning raw
OpenAPI text (JSON or YAML) into a
:class:`~spectools.parser.document.ResolvedDocument` that the tool builders
consume.

Typical usage::

    from spectools.parser import load_document

    document = load_document(text)
    for op in document.get_operations():
        print(op.method.value.upper(), op.path)

Sub-modules:

* :mod:`~spectools.parser.loader` -- text parsing with format sniffing, plus
  the I/O layer (URL, file, stdin, inline).
* :mod:`~spectools.parser.resolver` -- ``$ref`` resolution with fallback
  nodes for missing, external and circular pointers.
* :mod:`~spectools.parser.extractor` -- walks the resolved tree and produces
  :class:`~spectools.models.OperationRecord` objects and tag lists.
* :mod:`~spectools.parser.document` -- ties the three together.
"""

from spectools.parser.document import (
    ResolvedDocument,
    abuild_document,
    build_document,
    load_document,
)
from spectools.parser.loader import load_spec, parse_document, read_source

__all__ = [
    "ResolvedDocument",
    "abuild_document",
    "build_document",
    "load_document",
    "load_spec",
    "parse_document",
    "read_source",
]
