"""
Nix / Home Manager bootstrap service.

Layered like the other services: ``data`` (fixed values and
templates) → ``domain`` (pure logic) → ``detection`` (read-only
probes) → ``execution`` (side effects) → ``orchestration`` (the
five-stage pipeline).  Import from the submodules directly.
"""
