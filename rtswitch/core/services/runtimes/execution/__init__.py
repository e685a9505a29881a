"""
L4 Execution — side effects: network, archives, links, installs.
"""

from rtswitch.core.services.runtimes.execution.download import (  # noqa: F401
    download_file,
    fetch_json,
)
from rtswitch.core.services.runtimes.execution.extract import extract_archive  # noqa: F401
from rtswitch.core.services.runtimes.execution.installer import install_release  # noqa: F401
