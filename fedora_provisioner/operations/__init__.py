from . import dns, dnf, firmware, flatpak, fonts, kernel, packages, repositories, services, themes
from .context import BuildCtx

# Session order. Later groups rely on earlier ones (repositories before the
# packages they provide, metadata refresh before the kernel pick).
GROUP_BUILDERS = (
    dns.build,
    dnf.build,
    firmware.build,
    flatpak.remote_operations,
    repositories.build,
    packages.build,
    kernel.build,
    flatpak.app_operations,
    services.enable_operations,
    fonts.build,
    themes.icon_operations,
    services.disable_operations,
    themes.kde_operations,
)

__all__ = ["BuildCtx", "GROUP_BUILDERS"]
