"""
L3 Detection — read-only inspection of upstream catalogs and on-disk state.
"""

from rtswitch.core.services.runtimes.detection.accessibility import check_accessible  # noqa: F401
from rtswitch.core.services.runtimes.detection.catalog import (  # noqa: F401
    find_release,
    resolve_catalog,
)
from rtswitch.core.services.runtimes.detection.registry import (  # noqa: F401
    current_version,
    kind_root,
    list_installed,
    pointer_path,
)
