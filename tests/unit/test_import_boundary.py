"""Unit tests for the import boundary checking script.

Tests verify that the hexagonal architecture import rules are enforced:
- domain/ imports NOTHING from other src layers
- application/ imports from domain/ only
- infrastructure/ imports from domain/ and application/
- bootstrap/ may import from every layer
- config/ is shared and importable from anywhere
- httpx and prometheus_client only in infrastructure/ and bootstrap/
"""

import ast
import sys
import tempfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "scripts"))

from check_imports import (  # noqa: E402
    ALLOWED_IMPORTS,
    LAYER_HIERARCHY,
    ADAPTER_LIBRARIES,
    SHARED_PACKAGES,
    check_file_imports,
    check_import_boundaries,
    format_violations,
    get_import_module,
    main,
)


class TestLayerRules:
    """Test that the layer rules are correctly defined."""

    def test_domain_is_innermost(self) -> None:
        """Domain should be the innermost layer (level 0)."""
        assert LAYER_HIERARCHY["domain"] == 0

    def test_bootstrap_is_outermost(self) -> None:
        """Bootstrap should be the outermost layer."""
        assert LAYER_HIERARCHY["bootstrap"] == max(LAYER_HIERARCHY.values())

    def test_domain_imports_nothing(self) -> None:
        """Domain should not be allowed to import any src layers."""
        assert ALLOWED_IMPORTS["domain"] == set()

    def test_application_imports_domain_only(self) -> None:
        """Application can only import from domain."""
        assert ALLOWED_IMPORTS["application"] == {"domain"}

    def test_config_is_shared(self) -> None:
        """Config is outside the layering."""
        assert "config" in SHARED_PACKAGES

    def test_adapter_libraries(self) -> None:
        assert ADAPTER_LIBRARIES == {"httpx", "prometheus_client"}


class TestGetImportModule:
    """Test the get_import_module helper function."""

    def test_import_from_statement(self) -> None:
        """Test extraction from 'from x import y' statement."""
        node = ast.parse("from src.domain.models import CitizenRequest").body[0]
        assert isinstance(node, ast.ImportFrom)
        assert get_import_module(node) == "src.domain.models"

    def test_import_statement(self) -> None:
        """Test extraction from 'import x' statement."""
        node = ast.parse("import src.domain.models").body[0]
        assert isinstance(node, ast.Import)
        assert get_import_module(node) == "src.domain.models"

    def test_none_for_relative_import(self) -> None:
        """Relative imports have no module name."""
        node = ast.parse("from . import something").body[0]
        assert isinstance(node, ast.ImportFrom)
        assert get_import_module(node) is None


class TestCheckFileImports:
    """Test the check_file_imports function with temporary files."""

    @pytest.fixture
    def temp_src_dir(self) -> Path:
        """Create a temporary src directory structure."""
        with tempfile.TemporaryDirectory() as tmpdir:
            src_dir = Path(tmpdir) / "src"
            src_dir.mkdir()
            for layer in ["domain", "application", "infrastructure", "bootstrap"]:
                (src_dir / layer).mkdir()
                (src_dir / layer / "__init__.py").write_text("")
            yield src_dir

    def test_valid_import_domain_to_stdlib(self, temp_src_dir: Path) -> None:
        """Domain can import from standard library and third parties."""
        domain_file = temp_src_dir / "domain" / "routing.py"
        domain_file.write_text("import warnings\nimport structlog\n")

        assert check_file_imports(domain_file, temp_src_dir) == []

    def test_valid_import_application_to_config(self, temp_src_dir: Path) -> None:
        """Application can import shared config."""
        app_file = temp_src_dir / "application" / "dispatcher.py"
        app_file.write_text("from src.config.pipeline_config import BatchProcessingConfig")

        assert check_file_imports(app_file, temp_src_dir) == []

    def test_valid_import_bootstrap_to_infrastructure(
        self, temp_src_dir: Path
    ) -> None:
        """Bootstrap wires infrastructure adapters."""
        boot_file = temp_src_dir / "bootstrap" / "pipeline.py"
        boot_file.write_text("from src.infrastructure.stubs import LedgerStub")

        assert check_file_imports(boot_file, temp_src_dir) == []

    def test_violation_domain_imports_application(self, temp_src_dir: Path) -> None:
        """Domain importing application should be detected."""
        domain_file = temp_src_dir / "domain" / "bad_module.py"
        domain_file.write_text("from src.application.services import LifecycleService")

        violations = check_file_imports(domain_file, temp_src_dir)
        assert len(violations) == 1
        assert violations[0][1] == 1
        assert "domain layer cannot import from application" in violations[0][2]

    def test_violation_application_imports_infrastructure(
        self, temp_src_dir: Path
    ) -> None:
        """Application importing infrastructure should be detected."""
        app_file = temp_src_dir / "application" / "bad_service.py"
        app_file.write_text("from src.infrastructure.stubs import LedgerStub")

        violations = check_file_imports(app_file, temp_src_dir)
        assert len(violations) == 1
        assert "application layer cannot import from infrastructure" in violations[0][2]

    def test_violation_infrastructure_imports_bootstrap(
        self, temp_src_dir: Path
    ) -> None:
        """Infrastructure importing bootstrap should be detected."""
        infra_file = temp_src_dir / "infrastructure" / "bad_adapter.py"
        infra_file.write_text("from src.bootstrap.pipeline import Pipeline")

        violations = check_file_imports(infra_file, temp_src_dir)
        assert len(violations) == 1
        assert "infrastructure layer cannot import from bootstrap" in violations[0][2]

    def test_multiple_violations_in_single_file(self, temp_src_dir: Path) -> None:
        """Multiple violations in one file should all be detected."""
        domain_file = temp_src_dir / "domain" / "very_bad_module.py"
        domain_file.write_text(
            "from src.infrastructure.stubs import A\n"
            "from src.application.services import B\n"
            "from src.bootstrap.pipeline import C\n"
        )

        assert len(check_file_imports(domain_file, temp_src_dir)) == 3

    def test_violation_application_uses_httpx(self, temp_src_dir: Path) -> None:
        """Network clients belong to adapters."""
        app_file = temp_src_dir / "application" / "ledger_client.py"
        app_file.write_text("import httpx\n")

        violations = check_file_imports(app_file, temp_src_dir)
        assert [v.message for v in violations] == [
            "application layer cannot use adapter library httpx"
        ]

    def test_valid_infrastructure_uses_adapter_libraries(
        self, temp_src_dir: Path
    ) -> None:
        infra_file = temp_src_dir / "infrastructure" / "metrics.py"
        infra_file.write_text("import httpx\nfrom prometheus_client import Counter\n")

        assert check_file_imports(infra_file, temp_src_dir) == []


class TestCheckImportBoundaries:
    """Test the main check_import_boundaries function."""

    def test_nonexistent_directory(self) -> None:
        """Should handle nonexistent directory gracefully."""
        assert check_import_boundaries(Path("/nonexistent/path")) == []

    def test_scans_nested_files(self) -> None:
        """Should scan all .py files recursively."""
        with tempfile.TemporaryDirectory() as tmpdir:
            src_dir = Path(tmpdir) / "src"
            nested = src_dir / "domain" / "services"
            nested.mkdir(parents=True)
            (nested / "nested.py").write_text("from src.infrastructure import x")

            violations = check_import_boundaries(src_dir)
            assert len(violations) == 1
            assert "nested.py" in violations[0][0]

    def test_project_source_has_no_violations(self) -> None:
        """The project's own src tree respects the layering."""
        assert check_import_boundaries(PROJECT_ROOT / "src") == []


class TestMain:
    """Tests for the command line entry point."""

    def test_clean_tree_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(PROJECT_ROOT / "src")]) == 0
        assert "No import boundary violations" in capsys.readouterr().out

    def test_violations_exit_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bad = tmp_path / "domain" / "bad.py"
        bad.parent.mkdir()
        bad.write_text("from src.bootstrap.pipeline import Pipeline\n")

        assert main([str(tmp_path)]) == 1
        output = capsys.readouterr().out
        assert "bad.py:1: domain layer cannot import from bootstrap" in output
        assert "Total: 1 violation(s)" in output

    def test_format_no_violations(self) -> None:
        assert format_violations([]) == ""
