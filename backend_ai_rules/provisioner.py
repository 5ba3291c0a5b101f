"""Copy the guideline entry point into a consuming project.

``provision`` is what the lifecycle hook and the ``provision`` command run:
it locates ``AGENTS.md`` (and optionally the ``rules`` directory) under the
vendor root the package is installed in and copies it into the target
project root. Development installs only; a production run is a no-op.

Every copy is staged in a temporary sibling first and then swapped in with
:func:`os.replace`. A failed run leaves the project as it was.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Mapping

from .config import default_config, validate_config
from .errors import ConfigError, DestinationNotReadable, DestinationNotWritable, SourceNotFound

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
NO_DEV_ENV = "AI_RULES_NO_DEV"
_TRUTHY = {"1", "true", "yes", "on"}


def resolve_dev_mode(no_dev: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    """Return whether this run counts as a development install."""
    if no_dev:
        return False
    env = os.environ if environ is None else environ
    return env.get(NO_DEV_ENV, "").strip().lower() not in _TRUTHY


def default_vendor_root(config: Dict | None = None) -> Path:
    """Return the directory this package is installed under."""
    cfg = config or default_config()
    if cfg["layout"] == "flat":
        return PACKAGE_ROOT
    return PACKAGE_ROOT.parent


def _package_dir(vendor_root: Path, cfg: Dict) -> Path:
    if cfg["layout"] == "flat":
        return Path(vendor_root)
    return Path(vendor_root) / cfg["package_directory"]


def agents_source(vendor_root: Path, config: Dict | None = None) -> Path:
    cfg = config or default_config()
    return _package_dir(vendor_root, cfg) / cfg["agents_file"]


def rules_source(vendor_root: Path, config: Dict | None = None) -> Path:
    cfg = config or default_config()
    return _package_dir(vendor_root, cfg) / cfg["rules"]["source"]


def _plan(vendor_root: Path, target_root: Path, cfg: Dict, with_rules: bool) -> List[tuple[Path, Path]]:
    """Return ``(source, destination)`` pairs.

    Every source must exist and every destination must be replaceable by
    its source's kind before anything is written.
    """
    source = agents_source(vendor_root, cfg)
    if not source.is_file():
        raise SourceNotFound(f"{cfg['agents_file']} not found at {source}", source)
    agents_destination = Path(target_root) / source.name
    if agents_destination.is_dir():
        raise DestinationNotWritable(f"{agents_destination} is a directory", agents_destination)
    pairs = [(source, agents_destination)]
    if with_rules:
        rules = rules_source(vendor_root, cfg)
        if not rules.is_dir():
            raise SourceNotFound(f"rules directory not found at {rules}", rules)
        destination = Path(target_root) / cfg["rules"]["target"]
        resolved = destination.resolve()
        if Path(target_root).resolve() not in resolved.parents or resolved == agents_destination.resolve():
            raise ConfigError(
                f"rules.target {cfg['rules']['target']!r} must be a directory inside {target_root}"
            )
        if destination.is_symlink() or (destination.exists() and not destination.is_dir()):
            raise DestinationNotWritable(f"{destination} exists and is not a directory", destination)
        pairs.append((rules, destination))
    return pairs


def _stage(source: Path, destination: Path) -> Path:
    """Copy *source* into a fresh staging directory beside *destination*."""
    staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}.", dir=destination.parent))
    staged = staging / destination.name
    try:
        if source.is_dir():
            shutil.copytree(source, staged)
        else:
            shutil.copyfile(source, staged)
            shutil.copymode(source, staged)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    return staging


def _previous(staging: Path, destination: Path) -> Path:
    return staging / f"{destination.name}.previous"


def _swap(staging: Path, destination: Path) -> None:
    # The old copy is parked in staging so a later failure can put it back.
    if destination.exists() or destination.is_symlink():
        os.replace(destination, _previous(staging, destination))
    os.replace(staging / destination.name, destination)


def _restore(staging: Path, destination: Path) -> None:
    if not (staging / destination.name).exists():
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
        else:
            destination.unlink(missing_ok=True)
    previous = _previous(staging, destination)
    if previous.exists() or previous.is_symlink():
        os.replace(previous, destination)


def _commit(staged: List[tuple[Path, Path]]) -> None:
    """Swap every staged copy into place, or none of them."""
    swapped: List[tuple[Path, Path]] = []
    try:
        for staging, destination in staged:
            swapped.append((staging, destination))
            _swap(staging, destination)
    except OSError as exc:
        failed = swapped[-1][1]
        for staging, destination in reversed(swapped):
            try:
                _restore(staging, destination)
            except OSError as restore_exc:
                logger.error("Could not restore %s: %s", destination, restore_exc)
        raise DestinationNotWritable(f"cannot write {failed}: {exc}", failed) from exc


def provision(
    dev_mode: bool,
    vendor_root: str | Path,
    target_root: str | Path,
    *,
    config: Dict | None = None,
    with_rules: bool | None = None,
    write: Callable[[str], None] = print,
) -> List[Path]:
    """Copy ``AGENTS.md`` from *vendor_root* into *target_root*.

    Returns the destinations written; an empty list when ``dev_mode`` is
    falsy. Existing destinations are overwritten. ``with_rules`` overrides
    the ``rules.copy`` setting.

    Raises :class:`SourceNotFound` before anything is written when a source
    is missing, and :class:`DestinationNotWritable` when a destination
    cannot be created or replaced. Either every destination is updated or
    none is.
    """
    cfg = config or default_config()
    if not dev_mode:
        logger.info("Not a dev-mode install; skipping %s provisioning.", cfg["agents_file"])
        return []
    validate_config(cfg)
    if with_rules is None:
        with_rules = cfg["rules"]["copy"]

    pairs = _plan(Path(vendor_root), Path(target_root), cfg, with_rules)

    staged: List[tuple[Path, Path]] = []
    try:
        for source, destination in pairs:
            logger.debug("Staging %s for %s", source, destination)
            try:
                staged.append((_stage(source, destination), destination))
            except OSError as exc:
                raise DestinationNotWritable(f"cannot write {destination}: {exc}", destination) from exc
        _commit(staged)
    finally:
        for staging, _ in staged:
            shutil.rmtree(staging, ignore_errors=True)

    for source, destination in pairs:
        if source.is_dir():
            write(f"{source.name} copied to {destination.name}/.")
        else:
            write(f"{destination.name} copied to root directory.")
    return [destination for _, destination in pairs]


def _tree_files(root: Path) -> Dict[str, Path]:
    return {p.relative_to(root).as_posix(): p for p in sorted(root.rglob("*")) if p.is_file()}


def _matches(source: Path, destination: Path) -> bool:
    try:
        current = destination.read_bytes()
    except OSError as exc:
        raise DestinationNotReadable(f"cannot read {destination}: {exc}", destination) from exc
    return current == source.read_bytes()


def pending_changes(
    vendor_root: str | Path,
    target_root: str | Path,
    *,
    config: Dict | None = None,
    with_rules: bool | None = None,
) -> List[str]:
    """Describe what ``provision`` would change, without writing anything.

    Entries are ``missing: <path>``, ``stale: <path>`` or ``extra: <path>``;
    an empty list means the target is up to date.
    """
    cfg = config or default_config()
    validate_config(cfg)
    if with_rules is None:
        with_rules = cfg["rules"]["copy"]
    changes: List[str] = []
    for source, destination in _plan(Path(vendor_root), Path(target_root), cfg, with_rules):
        if source.is_file():
            if not destination.is_file():
                changes.append(f"missing: {destination}")
            elif not _matches(source, destination):
                changes.append(f"stale: {destination}")
            continue
        if not destination.is_dir():
            changes.append(f"missing: {destination}")
            continue
        wanted = _tree_files(source)
        present = _tree_files(destination)
        for rel, path in wanted.items():
            if rel not in present:
                changes.append(f"missing: {destination / rel}")
            elif not _matches(path, present[rel]):
                changes.append(f"stale: {destination / rel}")
        for rel in sorted(set(present) - set(wanted)):
            changes.append(f"extra: {destination / rel}")
    return changes
