"""hmbootstrap — bootstrap Nix and Home Manager for the current user."""

__version__ = "0.1.0"
