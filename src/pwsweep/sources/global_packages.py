"""Sources for packages installed globally through a package manager."""

from __future__ import annotations

from pathlib import Path

from pwsweep.core.locator import parse_npm_list, parse_yarn_list
from pwsweep.models.source import GlobalPackageSource, SourceGroup

_GROUP = SourceGroup("global", "Global Packages", "playwright and @playwright/* installed with -g")


class NpmGlobalSource(GlobalPackageSource):
    """Finds global npm packages."""

    id = "npm_global"
    name = "npm Global Packages"
    description = "npm global package"
    group = _GROUP
    sort_order = 20
    executable = "npm"
    _list_args = ["npm", "list", "-g", "--depth=0", "--json"]
    _root_args = ["npm", "root", "-g"]

    def _parse(self, stdout: str) -> list[str]:
        return parse_npm_list(stdout)

    def _uninstall_args(self, package: str) -> list[str]:
        return ["npm", "uninstall", "-g", package]


class YarnGlobalSource(GlobalPackageSource):
    """Finds global yarn (classic) packages."""

    id = "yarn_global"
    name = "yarn Global Packages"
    description = "yarn global package"
    group = _GROUP
    sort_order = 30
    executable = "yarn"
    _list_args = ["yarn", "global", "list"]
    _root_args = ["yarn", "global", "dir"]

    def _parse(self, stdout: str) -> list[str]:
        return parse_yarn_list(stdout)

    def _global_root(self, stdout: str) -> Path | None:
        root = super()._global_root(stdout)
        return root / "node_modules" if root else None

    def _uninstall_args(self, package: str) -> list[str]:
        return ["yarn", "global", "remove", package]


class PnpmGlobalSource(GlobalPackageSource):
    """Finds global pnpm packages."""

    id = "pnpm_global"
    name = "pnpm Global Packages"
    description = "pnpm global package"
    group = _GROUP
    sort_order = 40
    executable = "pnpm"
    _list_args = ["pnpm", "list", "-g", "--depth=0", "--json"]
    _root_args = ["pnpm", "root", "-g"]

    def _parse(self, stdout: str) -> list[str]:
        return parse_npm_list(stdout)

    def _uninstall_args(self, package: str) -> list[str]:
        return ["pnpm", "remove", "-g", package]
