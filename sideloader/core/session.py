"""
Device session state.
Holds the selected device and the package the current flow works on.
"""

import logging
from typing import List, Optional

from ..utils.security_utils import validate_device_id, validate_package_name

logger = logging.getLogger(__name__)


class DeviceSession:
    """Connected-device state handed to the bridge and the orchestrator.

    Created when a device connects and cleared on disconnect. An empty
    ``device_id`` means the bridge picks the single attached device itself.
    """

    def __init__(self, device_id: Optional[str] = None, current_package: str = ""):
        self.device_id: Optional[str] = None
        self.current_package: str = ""
        if device_id:
            self.select_device(device_id)
        if current_package:
            self.set_package(current_package)

    def select_device(self, device_id: Optional[str]) -> None:
        """Select a device, or pass an empty value to fall back to the implicit one."""
        self.device_id = validate_device_id(device_id) if device_id else None
        logger.debug(f"Selected device: {self.device_id or '<implicit>'}")

    def set_package(self, package: str) -> None:
        self.current_package = validate_package_name(package)

    def clear(self) -> None:
        """Forget the device and package, e.g. after a disconnect."""
        self.device_id = None
        self.current_package = ""

    def target_args(self) -> List[str]:
        """Selector arguments injected in front of every bridge command."""
        if self.device_id:
            return ["-s", self.device_id]
        return []

    @property
    def has_package(self) -> bool:
        return bool(self.current_package)

    def __repr__(self) -> str:
        return f"DeviceSession(device_id={self.device_id!r}, current_package={self.current_package!r})"
