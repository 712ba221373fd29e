"""
L0 Data — Home Manager file templates.

Placeholders use the ``@name@`` form (as nixpkgs' substituteAll does)
so they never collide with Nix's own ``${...}`` interpolation.
"""

from __future__ import annotations

FLAKE_TEMPLATE = """\
{
  description = "Home Manager configuration for @username@";
  inputs = {
    nixpkgs.url = "github:nixos/nixpkgs/@nixpkgs_branch@";
    home-manager = {
      url = "github:nix-community/home-manager/@home_manager_release_tag@";
      inputs.nixpkgs.follows = "nixpkgs";
    };
  };
  outputs = { self, nixpkgs, home-manager, ... }@inputs:
  let system = "@system@";
  in {
    homeConfigurations."@username@" = home-manager.lib.homeManagerConfiguration {
      pkgs = nixpkgs.legacyPackages.${system};
      extraSpecialArgs = { inherit system; USERNAME = "@username@"; };
      modules = [ ./home.nix ];
    };
  };
}
"""

HOME_TEMPLATE = """\
{ config, pkgs, lib, USERNAME, ... }:
let
  # pkgs.php is the default PHP of this nixpkgs branch; pin e.g. pkgs.php83 if needed
  phpEnv = pkgs.@php_attribute@;
in
{
  home.username = USERNAME;
  home.homeDirectory = "/home/${USERNAME}";
  home.stateVersion = "@hm_state_version@";

  programs.home-manager.enable = true;

  nix = {
    package = pkgs.nix;
    settings = {
      show-trace = true;
      # experimental-features live in ~/.config/nix/nix.conf
    };
  };

  home.packages = [
@packages@
  ];

  programs.@shell@.enable = true;
}
"""
