"""
L1 Domain — Operator-facing text for failures and success.

Pure string builders; the CLI decides where the text goes.
"""

from __future__ import annotations

from hmbootstrap.core.models.settings import BootstrapSettings

_RULE = "-" * 80


def manual_switch_command(settings: BootstrapSettings, username: str) -> str:
    """The command an operator runs by hand once ``nix`` works."""
    flags = " ".join(settings.feature_flags())
    return (
        f"home-manager {flags} switch "
        f'--flake "{settings.flake_target(username)}" '
        f'--show-trace -b "{settings.backup_suffix}"'
    )


def build_remediation(settings: BootstrapSettings, username: str) -> str:
    """NEXT STEPS block printed when ``home-manager switch`` failed."""
    suffix = settings.backup_suffix
    lines = [
        "",
        _RULE,
        "🔴 Home Manager switch FAILED.",
        "",
        "➡️ NEXT STEPS:",
        "",
        "1. ENSURE NIX IS IN PATH FOR NEW TERMINALS:",
        "   The Nix installer should add a line to your shell's startup file (e.g., ~/.bashrc, ~/.zshrc).",
        "   Look for a line like: '. \"$HOME/.nix-profile/etc/profile.d/nix-daemon.sh\"' (or nix.sh).",
        "   If missing, add it. Then, CLOSE AND REOPEN YOUR TERMINAL or run 'source ~/.your_shell_rc_file'.",
        "   Verify by typing: nix --version (it MUST work).",
        "",
        "2. MANUALLY APPLY HOME MANAGER (Once 'nix --version' works):",
        "   In a NEW terminal, run:",
        f"   {manual_switch_command(settings, username)}",
        "",
        f"   (The '-b {suffix}' will backup conflicting files like ~/.bashrc to ~/.bashrc.{suffix}).",
        _RULE,
    ]
    return "\n".join(lines)


def post_install_notice() -> str:
    """Reminder shown right after the Nix installer finished."""
    return "\n".join([
        "IMPORTANT: The Nix installer should have modified your shell configuration file (e.g., ~/.bashrc, ~/.zshrc).",
        "           You will need to RE-LOGIN or source it (e.g., 'source ~/.bashrc') in ALL new terminals for 'nix' to be found.",
        "           The installer usually suggests a line like: '. $HOME/.nix-profile/etc/profile.d/nix.sh'",
        "           Please ensure such a line is present and active in your shell's startup file.",
    ])


def store_dir_notice(settings: BootstrapSettings, username: str) -> str:
    """Explanation shown before asking to create the Nix store directory."""
    store = settings.nix_store_dir
    return "\n".join([
        _RULE,
        f"Nix works best if its store is at {store}. This requires creating {store} and",
        "giving your user ownership *once* using sudo:",
        f"  sudo mkdir -m 0755 {store}",
        f"  sudo chown {username} {store}",
        _RULE,
    ])


def success_summary(settings: BootstrapSettings) -> str:
    """Closing message after a successful switch."""
    suffix = settings.backup_suffix
    lines = [
        "Packages should be available after you OPEN A NEW TERMINAL or re-login.",
        "Your original ~/.bashrc, ~/.profile, and ~/.config/nix/nix.conf (if they existed and conflicted)",
        f"have been backed up with the suffix '.{suffix}' in your home directory/subdirectories.",
    ]
    if settings.verify_commands:
        lines.append("Verify by typing in a new terminal:")
        lines.extend(f"  {cmd}" for cmd in settings.verify_commands)
    return "\n".join(lines)
