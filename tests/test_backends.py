"""Tests for the interval backends."""

import shutil

import pandas as pd
import pytest

from gwasenrich.backends import BioframeBackend, get_backend
from gwasenrich.exceptions import DependencyFailure, InvalidInput
from gwasenrich.utils.subprocess_utils import run_command

HAS_BEDTOOLS = shutil.which("bedtools") is not None


def _frame(rows):
    return pd.DataFrame(rows, columns=["chrom", "start", "end"]).astype({"start": "int64", "end": "int64"})


def _backends():
    backends = [BioframeBackend()]
    if HAS_BEDTOOLS:
        from gwasenrich.backends.bedtools import BedtoolsBackend
        backends.append(BedtoolsBackend())
    return backends


@pytest.fixture(params=_backends(), ids=lambda b: b.name)
def backend(request):
    return request.param


class TestGetBackend:
    """Test backend lookup by name."""

    def test_default_is_bioframe(self):
        assert get_backend().name == "bioframe"

    def test_unknown_backend(self):
        with pytest.raises(InvalidInput):
            get_backend("pyranges")

    @pytest.mark.skipif(HAS_BEDTOOLS, reason="bedtools is installed")
    def test_bedtools_missing(self):
        """Requesting bedtools without the binary is a dependency failure."""
        with pytest.raises(DependencyFailure):
            get_backend("bedtools")


class TestMerge:
    """Test collapsing of overlapping intervals."""

    def test_overlapping_collapse(self, backend):
        """Nested and overlapping records reduce to one span."""
        merged = backend.merge(_frame([("chr1", 150, 160), ("chr1", 150, 170), ("chr1", 165, 180)]))
        assert merged.values.tolist() == [["chr1", 150, 180]]

    def test_book_ended_collapse(self, backend):
        """Adjacent records form one continuous locus."""
        merged = backend.merge(_frame([("chr1", 0, 100), ("chr1", 100, 200)]))
        assert merged.values.tolist() == [["chr1", 0, 200]]

    def test_chromosomes_kept_apart(self, backend):
        """Same coordinates on different chromosomes stay separate and sorted."""
        merged = backend.merge(_frame([("chr2", 10, 20), ("chr1", 50, 60), ("chr1", 10, 20)]))
        assert merged.values.tolist() == [
            ["chr1", 10, 20],
            ["chr1", 50, 60],
            ["chr2", 10, 20],
        ]

    def test_idempotent(self, backend):
        """Reducing an already reduced catalog changes nothing."""
        frame = _frame([("chr1", 5, 15), ("chr1", 10, 30), ("chr1", 40, 50), ("chr3", 0, 9)])
        once = backend.merge(frame)
        twice = backend.merge(once)
        pd.testing.assert_frame_equal(once, twice)


class TestOverlapIndex:
    """Test overlap pair listing."""

    def test_pairs(self, backend):
        """Each overlapping pair is listed by row position."""
        query = _frame([("chr1", 0, 500), ("chr1", 600, 700), ("chr2", 0, 100)])
        subject = _frame([("chr1", 10, 20), ("chr1", 100, 120), ("chr2", 50, 60)])
        pairs = backend.overlap_index(query, subject)
        assert pairs.values.tolist() == [[0, 0], [0, 1], [2, 2]]
        assert backend.count_overlaps(query, subject) == 3

    def test_book_ended_not_counted(self, backend):
        """Touching intervals do not overlap."""
        query = _frame([("chr1", 200, 300)])
        subject = _frame([("chr1", 100, 200)])
        assert backend.count_overlaps(query, subject) == 0

    def test_no_cross_chromosome_hits(self, backend):
        query = _frame([("chr2", 100, 200)])
        subject = _frame([("chr1", 100, 200)])
        assert backend.count_overlaps(query, subject) == 0

    def test_empty_input(self, backend):
        query = _frame([])
        subject = _frame([("chr1", 100, 200)])
        pairs = backend.overlap_index(query, subject)
        assert list(pairs.columns) == ["query_idx", "subject_idx"]
        assert len(pairs) == 0


class TestBioframeBackend:
    """Test error wrapping in the bioframe backend."""

    def _bad_frame(self):
        return pd.DataFrame({"chrom": ["chr1"], "start": ["a"], "end": ["b"]})

    def test_merge_failure_is_chained(self):
        with pytest.raises(DependencyFailure) as excinfo:
            BioframeBackend().merge(self._bad_frame())
        assert excinfo.value.__cause__ is not None

    def test_overlap_failure_is_chained(self):
        subject = _frame([("chr1", 100, 200)])
        with pytest.raises(DependencyFailure) as excinfo:
            BioframeBackend().overlap_index(self._bad_frame(), subject)
        assert excinfo.value.__cause__ is not None

    def test_failures_are_runtime_errors(self):
        with pytest.raises(RuntimeError):
            BioframeBackend().merge(self._bad_frame())


class TestRunCommand:
    """Test subprocess failures surfaced by the bedtools backend."""

    def test_missing_binary_is_chained(self):
        with pytest.raises(DependencyFailure) as excinfo:
            run_command(["gwasenrich-no-such-tool", "--version"])
        assert isinstance(excinfo.value.__cause__, OSError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
