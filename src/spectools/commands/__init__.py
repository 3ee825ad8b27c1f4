"""Built-in CLI sub-commands for spectools.

* :mod:`~spectools.commands.inspect` -- list operations, tags, and tools of a
  document; show statistics and tool schemas.
* :mod:`~spectools.commands.ids` -- work with tool identifiers and names.
* :mod:`~spectools.commands.call` -- execute a tool against the API.

Shared helpers for loading settings and documents live in
:mod:`~spectools.commands.common`.
"""
