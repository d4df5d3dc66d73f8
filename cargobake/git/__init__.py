"""Git helpers: URL translation and upstream repository discovery."""

from cargobake.git.repo import ProjectRepo
from cargobake.git.url import GitPrefix, git_to_yocto_git_url

__all__ = ["GitPrefix", "ProjectRepo", "git_to_yocto_git_url"]
