"""
L4 Execution — side-effecting steps: subprocess, download, build, install.
"""

from libacquire.core.services.acquire.execution.download import (  # noqa: F401
    download_asset,
    extract_archive,
)
from libacquire.core.services.acquire.execution.installer import (  # noqa: F401
    install_artifacts,
    verify_artifacts,
)
from libacquire.core.services.acquire.execution.source_build import (  # noqa: F401
    build_from_source,
)
