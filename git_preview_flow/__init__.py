"""
git-preview-flow - Branch and preview-branch workflow for local project repositories
"""

from .__version__ import __version__
from .services.branch_synchronizer import BranchSynchronizer
from .services.workflow import WorkflowFacade

__all__ = ["BranchSynchronizer", "WorkflowFacade", "__version__"]
