"""Project and solution document generators."""

from .project import Flavor, ProjectFileGenerator
from .solution import SolutionFileGenerator

__all__ = ["Flavor", "ProjectFileGenerator", "SolutionFileGenerator"]
