"""
Tests for first-match candidate resolution and integration-script lookup.
"""

from pathlib import Path

import pytest

from hmbootstrap.core.services.nix_bootstrap.detection.profile_scripts import find_profile_script
from hmbootstrap.core.services.nix_bootstrap.domain.resolution import first_match


class TestFirstMatch:
    def test_returns_first_non_none(self):
        assert first_match([1, 2, 3], lambda n: n * 10 if n >= 2 else None) == (2, 20)

    def test_stops_after_match(self):
        seen = []

        def resolve(n):
            seen.append(n)
            return n if n == 2 else None

        first_match([1, 2, 3, 4], resolve)
        assert seen == [1, 2]

    def test_no_match(self):
        assert first_match(["a", "b"], lambda _: None) is None

    def test_empty_candidates(self):
        assert first_match([], lambda x: x) is None


class TestFindProfileScript:
    @pytest.mark.parametrize("k", [0, 1, 2, 3])
    def test_only_kth_exists(self, tmp_path: Path, k: int):
        candidates = [tmp_path / f"candidate-{i}" / "nix.sh" for i in range(4)]
        candidates[k].parent.mkdir()
        candidates[k].write_text("export PATH=/nix/bin:$PATH\n")

        assert find_profile_script(candidates) == candidates[k]

    def test_priority_order_when_several_exist(self, tmp_path: Path):
        candidates = [tmp_path / f"nix-{i}.sh" for i in range(3)]
        candidates[1].write_text("")
        candidates[2].write_text("")
        assert find_profile_script(candidates) == candidates[1]

    def test_directories_do_not_count(self, tmp_path: Path):
        directory = tmp_path / "nix.sh"
        directory.mkdir()
        assert find_profile_script([directory]) is None

    def test_none_exist(self, tmp_path: Path):
        assert find_profile_script([tmp_path / "a.sh", tmp_path / "b.sh"]) is None
