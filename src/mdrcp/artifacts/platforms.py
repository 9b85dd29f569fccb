"""Platform detection and mapping."""
import platform
from typing import NamedTuple, Optional


class PlatformMapping(NamedTuple):
    """Platform-specific values."""
    exe_template: str
    default_target: Optional[str]  # None = derived from home_variable
    home_variable: Optional[str]
    target_hint: str


PLATFORM_MAPPINGS = {
    "Linux": PlatformMapping(
        exe_template="{name}",
        default_target=None,
        home_variable="HOME",
        target_hint="~/.local/bin"
    ),
    "Darwin": PlatformMapping(
        exe_template="{name}",
        default_target=None,
        home_variable="HOME",
        target_hint="~/.local/bin"
    ),
    "Windows": PlatformMapping(
        exe_template="{name}.exe",  # Windows executables need .exe
        default_target=r"c:\apps",
        home_variable=None,
        target_hint=r"c:\apps"
    )
}

# Unlisted Unix flavours behave like Linux
FALLBACK_SYSTEM = "Linux"


def get_platform_mapping(system: str = None) -> PlatformMapping:
    """Get the mapping for a platform, defaulting to the current one."""
    if system is None:
        system = platform.system()
    return PLATFORM_MAPPINGS.get(system, PLATFORM_MAPPINGS[FALLBACK_SYSTEM])


def exe_filename(name: str, system: str = None) -> str:
    """Platform executable filename for a binary name."""
    return get_platform_mapping(system).exe_template.format(name=name)
