"""
Porter command extensions.

Third-party distributions contribute commands through the "porter.commands"
entry-point group. Each entry point loads to one of:
- a CommandDescriptor,
- a Command subclass decorated with @command (its __descriptor__ is used),
- an iterable of the above,
- a zero-argument callable returning any of the above.

An entry point that fails to load is reported as an ExtensionWarning and skipped;
the remaining commands stay available. Name clashes are not handled here: the registry
rejects them with DuplicateCommandError.
"""
import logging
from importlib.metadata import entry_points

from . import config
from .faults import ExtensionWarning
from .registry import CommandDescriptor
from .resources import ENGLISH

logger = logging.getLogger(__name__)


def _descriptors(loaded):
    if isinstance(loaded, CommandDescriptor):
        return [loaded]
    if isinstance(getattr(loaded, "__descriptor__", None), CommandDescriptor):
        return [loaded.__descriptor__]
    if callable(loaded):
        return _descriptors(loaded())
    descriptors = []
    for item in loaded:
        if isinstance(item, CommandDescriptor):
            descriptors.append(item)
        elif isinstance(getattr(item, "__descriptor__", None), CommandDescriptor):
            descriptors.append(item.__descriptor__)
        else:
            raise TypeError(f"{item!r} is not a command descriptor")
    return descriptors


def load_extensions(*, group=config.EXTENSION_GROUP, messages=ENGLISH):
    """
    collect extension descriptors from installed distributions.

    returns (descriptors, warnings): warnings holds one ExtensionWarning per entry point
    that could not be loaded.
    """
    descriptors = []
    warnings = []
    for entry in entry_points(group=group):
        try:
            loaded = _descriptors(entry.load())
        except Exception as error:  # NOQA: BLE001
            logger.debug("extension %s could not be loaded", entry.name, exc_info=error)
            warnings.append(ExtensionWarning(
                messages("extension-failure", name=entry.name, reason=error),
                name=entry.name,
                error=error,
            ))
            continue
        logger.debug("extension %s provides %d command(s)", entry.name, len(loaded))
        descriptors.extend(loaded)
    return descriptors, warnings


__all__ = (
    "load_extensions",
)
