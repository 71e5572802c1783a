"""Tests for core modules."""

import pytest
import tempfile
from pathlib import Path

from gatecheck.core.analyzer import AnalyzerDescriptor, Category, Issue, Severity
from gatecheck.core.codebase import CodebaseView
from gatecheck.core.fingerprint import compute_fingerprint, normalize_construct, normalize_path
from gatecheck.core.registry import AnalyzerRegistry
from gatecheck.core.suppression import InlineSuppressor, line_has_suppression
from gatecheck.exceptions import DuplicateAnalyzerIdError, InvalidConfigError, UnknownAnalyzerError

from conftest import StubAnalyzer, make_issue


class TestSeverity:
    """Tests for Severity enum."""

    def test_ordering(self):
        """Test that severities are ordered critical > high > medium > low."""
        assert Severity.CRITICAL.rank > Severity.HIGH.rank > Severity.MEDIUM.rank > Severity.LOW.rank

    def test_weights_follow_ordering(self):
        """Test that more severe issues weigh more."""
        assert Severity.CRITICAL.weight > Severity.HIGH.weight > Severity.MEDIUM.weight > Severity.LOW.weight

    def test_is_at_least(self):
        """Test severity comparison."""
        assert Severity.CRITICAL.is_at_least(Severity.HIGH)
        assert Severity.HIGH.is_at_least(Severity.HIGH)
        assert not Severity.LOW.is_at_least(Severity.MEDIUM)

    def test_parse(self):
        """Test case-insensitive parsing."""
        assert Severity.parse("HIGH") == Severity.HIGH
        assert Severity.parse(" low ") == Severity.LOW

    def test_parse_invalid(self):
        """Test parsing an unknown severity."""
        with pytest.raises(InvalidConfigError):
            Severity.parse("blocker")


class TestIssue:
    """Tests for Issue class."""

    def test_create_normalizes_path(self):
        """Test that created issues carry normalized paths."""
        issue = Issue.create("sec-a", "./app//Foo.php", 3, Severity.HIGH, "problem")
        assert issue.path == "app/Foo.php"

    def test_negative_line_rejected(self):
        """Test that negative line numbers are rejected."""
        with pytest.raises(ValueError):
            make_issue(line=-1)

    def test_line_zero_allowed(self):
        """Test that line 0 denotes an issue without a line."""
        assert make_issue(line=0).line == 0

    def test_issue_to_dict(self):
        """Test issue serialization."""
        issue = Issue.create("sec-a", "app/Foo.php", 3, Severity.HIGH, "problem", snippet="x = 1")
        data = issue.to_dict()

        assert data["analyzer_id"] == "sec-a"
        assert data["severity"] == "high"
        assert data["line"] == 3
        assert data["snippet"] == "x = 1"
        assert data["fingerprint"] == issue.fingerprint

    def test_issue_from_dict(self):
        """Test issue deserialization."""
        issue = Issue.create("sec-a", "app/Foo.php", 3, Severity.HIGH, "problem")
        assert Issue.from_dict(issue.to_dict()) == issue

    def test_issue_is_immutable(self):
        """Test that issues cannot be modified."""
        issue = make_issue()
        with pytest.raises(AttributeError):
            issue.line = 5


class TestFingerprint:
    """Tests for issue fingerprints."""

    def test_stable_across_line_shift(self):
        """Test that moving an issue to another line keeps its fingerprint."""
        first = Issue.create("sec-a", "app/Foo.php", 10, Severity.HIGH, "problem", construct="$x = 1;")
        moved = Issue.create("sec-a", "app/Foo.php", 42, Severity.HIGH, "problem", construct="$x = 1;")
        assert first.fingerprint == moved.fingerprint

    def test_differs_by_path(self):
        """Test that the same construct in another file is a different issue."""
        assert compute_fingerprint("sec-a", "app/Foo.php", "x") != compute_fingerprint("sec-a", "app/Bar.php", "x")

    def test_differs_by_analyzer(self):
        """Test that the analyzer id is part of the identity."""
        assert compute_fingerprint("sec-a", "app/Foo.php", "x") != compute_fingerprint("sec-b", "app/Foo.php", "x")

    def test_whitespace_insensitive(self):
        """Test that reformatting a construct keeps its fingerprint."""
        assert compute_fingerprint("sec-a", "a.py", "x  =\t1") == compute_fingerprint("sec-a", "a.py", "x = 1")

    def test_path_spellings_match(self):
        """Test that equivalent path spellings give the same fingerprint."""
        assert compute_fingerprint("sec-a", "./app/Foo.php", "x") == compute_fingerprint("sec-a", "app\\Foo.php", "x")

    def test_normalize_path(self):
        """Test path normalization."""
        assert normalize_path("./app//Foo.php") == "app/Foo.php"
        assert normalize_path("/app/Foo.php") == "app/Foo.php"
        assert normalize_path(None) == ""

    def test_normalize_construct(self):
        """Test construct normalization."""
        assert normalize_construct("  a \n b  ") == "a b"
        assert normalize_construct(None) == ""


class TestAnalyzerRegistry:
    """Tests for AnalyzerRegistry class."""

    def test_registration_order(self):
        """Test that all() keeps registration order."""
        registry = AnalyzerRegistry([StubAnalyzer("b"), StubAnalyzer("a"), StubAnalyzer("c")])
        assert [d.id for d in registry.all()] == ["b", "a", "c"]
        assert registry.order_of("a") == 1

    def test_duplicate_id_rejected(self):
        """Test that an id cannot be registered twice."""
        registry = AnalyzerRegistry([StubAnalyzer("sec-a")])
        with pytest.raises(DuplicateAnalyzerIdError):
            registry.register(StubAnalyzer("sec-a"))

    def test_get_descriptor(self):
        """Test descriptor lookup."""
        registry = AnalyzerRegistry([StubAnalyzer("sec-a", severity=Severity.HIGH)])
        descriptor = registry.get("sec-a")

        assert isinstance(descriptor, AnalyzerDescriptor)
        assert descriptor.default_severity == Severity.HIGH

    def test_get_unknown(self):
        """Test lookup of an unregistered id."""
        registry = AnalyzerRegistry()
        with pytest.raises(UnknownAnalyzerError):
            registry.get("missing")
        with pytest.raises(UnknownAnalyzerError):
            registry.analyzer("missing")

    def test_by_category(self):
        """Test filtering descriptors by category."""
        registry = AnalyzerRegistry([
            StubAnalyzer("sec-a", category=Category.SECURITY),
            StubAnalyzer("perf-b", category=Category.PERFORMANCE),
        ])
        assert [d.id for d in registry.by_category(Category.PERFORMANCE)] == ["perf-b"]

    def test_contains_and_len(self):
        """Test membership and size."""
        registry = AnalyzerRegistry([StubAnalyzer("sec-a")])
        assert "sec-a" in registry
        assert "perf-b" not in registry
        assert len(registry) == 1


class TestCodebaseView:
    """Tests for CodebaseView class."""

    def test_discover_empty_directory(self):
        """Test discovery in empty directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            view = CodebaseView.discover(tmpdir)
            assert view.files == ()

    def test_discover_sorted_relative_paths(self):
        """Test that discovered paths are relative, POSIX and sorted."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "src").mkdir()
            (Path(tmpdir) / "src" / "b.py").write_text("b = 1\n")
            (Path(tmpdir) / "a.py").write_text("a = 1\n")

            view = CodebaseView.discover(tmpdir)
            assert view.files == ("a.py", "src/b.py")

    def test_exclude_directories(self):
        """Test that excluded directories are skipped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            node_modules = Path(tmpdir) / "node_modules"
            node_modules.mkdir()
            (node_modules / "lib.js").write_text("console.log(1)\n")
            (Path(tmpdir) / "app.js").write_text("let x = 1;\n")

            view = CodebaseView.discover(tmpdir)
            assert view.files == ("app.js",)

    def test_excluded_paths_patterns(self):
        """Test configured exclusion patterns."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "storage").mkdir()
            (Path(tmpdir) / "storage" / "cache.php").write_text("<?php\n")
            (Path(tmpdir) / "index.php").write_text("<?php\n")

            view = CodebaseView.discover(tmpdir, excluded_paths=["storage/*"])
            assert view.files == ("index.php",)

    def test_restrict_to_paths(self):
        """Test restricting discovery to sub-directories."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "src").mkdir()
            (Path(tmpdir) / "src" / "main.py").write_text("x = 1\n")
            (Path(tmpdir) / "setup.py").write_text("x = 1\n")

            view = CodebaseView.discover(tmpdir, paths=["src"])
            assert view.files == ("src/main.py",)

    def test_read_text_and_filters(self):
        """Test reading files and filtering them by suffix and name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "app.py").write_text("line1\nline2\n")
            (Path(tmpdir) / ".env").write_text("KEY=value\n")

            view = CodebaseView.discover(tmpdir)
            assert view.files_with_suffix(".py") == ["app.py"]
            assert view.files_named(".env") == [".env"]
            assert view.read_lines("app.py") == ["line1", "line2"]

    def test_missing_file_reads_empty(self):
        """Test that unreadable files read as empty."""
        with tempfile.TemporaryDirectory() as tmpdir:
            view = CodebaseView(root=Path(tmpdir), files=("gone.py",))
            assert view.read_text("gone.py") == ""


class TestInlineSuppression:
    """Tests for inline ignore comments."""

    def test_line_without_ids_covers_all(self):
        """Test that a bare ignore comment covers every analyzer."""
        assert line_has_suppression("x = 1  # @gatecheck-ignore", "sec-a")

    def test_line_with_ids(self):
        """Test that an ignore comment with ids covers only those analyzers."""
        line = "x = 1  # @gatecheck-ignore sec-a,perf-b"
        assert line_has_suppression(line, "sec-a")
        assert line_has_suppression(line, "perf-b")
        assert not line_has_suppression(line, "todo-comment")

    def test_no_comment(self):
        """Test a line without ignore comment."""
        assert not line_has_suppression("x = 1", "sec-a")

    def test_same_and_previous_line(self):
        """Test suppression on the issue line and on the line above."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "app.py").write_text(
                "a = 1  # @gatecheck-ignore sec-a\n"
                "# @gatecheck-ignore\n"
                "b = 2\n"
                "c = 3\n"
            )
            view = CodebaseView.discover(tmpdir)
            suppressor = InlineSuppressor(view)

            issues = [
                make_issue(path="app.py", line=1),
                make_issue(path="app.py", line=3),
                make_issue(path="app.py", line=4),
            ]
            kept, count = suppressor.filter(issues)

            assert count == 2
            assert [i.line for i in kept] == [4]

    def test_line_zero_never_suppressed(self):
        """Test that file-level issues are not suppressed by comments."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "app.py").write_text("# @gatecheck-ignore\n")
            view = CodebaseView.discover(tmpdir)

            assert not InlineSuppressor(view).is_suppressed(make_issue(path="app.py", line=0))
