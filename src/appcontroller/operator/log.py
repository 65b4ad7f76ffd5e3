"""Per-object logging, so every line of a pass names the App it is about."""
import logging
from typing import Any, MutableMapping, Tuple

from ..crds.base import NamespacedName

logger = logging.getLogger("appcontroller")


class ObjectLogger(logging.LoggerAdapter):
    """Prefixes messages with ``[namespace/name]`` and tags records with the key."""

    def __init__(self, base: logging.Logger, key: NamespacedName) -> None:
        super().__init__(base, {"object": str(key)})
        self.key = key

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.key}] {msg}", kwargs


def get_object_logger(key: NamespacedName) -> ObjectLogger:
    return ObjectLogger(logger, key)
