"""adolinks - Azure DevOps work item links for build information.

This package resolves the Azure DevOps work items associated with a build
and turns them into release-note links for a deployment server.
"""

__version__ = "0.1.0"
SCRIPT_NAME = "adolinks"
AZURE_DEVOPS_API_VERSION = "4.1"

__all__ = [
    "__version__",
    "SCRIPT_NAME",
    "AZURE_DEVOPS_API_VERSION",
]
