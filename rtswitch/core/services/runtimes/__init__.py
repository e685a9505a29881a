"""
Runtime version management — catalog, install, switch, delete.

Layers (each imports only from the layers above it):

    data/           L0  static tables
    domain/         L1  pure logic
    detection/      L3  read-only inspection
    execution/      L4  side effects
    orchestration/  L5  RuntimeManager
"""
