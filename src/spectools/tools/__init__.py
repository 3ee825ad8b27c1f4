"""Tool identifiers, names, assembly, and the tools registry.

Sub-modules:

* :mod:`~spectools.tools.identifiers` -- reversible ``METHOD::path`` ids.
* :mod:`~spectools.tools.names` -- abbreviation into 64-character names.
* :mod:`~spectools.tools.creation` -- :class:`~spectools.models.Tool`
  construction and the exploration meta-tools.
* :mod:`~spectools.tools.manager` -- :class:`ToolsManager`.
"""

from spectools.tools.creation import create_meta_tools, create_tool_from_operation
from spectools.tools.identifiers import decode_tool_id, encode_tool_id, is_valid_tool_id
from spectools.tools.manager import ToolsManager
from spectools.tools.names import abbreviate_name

__all__ = [
    "ToolsManager",
    "abbreviate_name",
    "create_meta_tools",
    "create_tool_from_operation",
    "decode_tool_id",
    "encode_tool_id",
    "is_valid_tool_id",
]
