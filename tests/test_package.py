"""Tests for webmctl package imports and exports."""

from __future__ import annotations


class TestPackageImports:
    """Tests for package imports."""

    def test_import_webmctl(self):
        import webmctl

        assert hasattr(webmctl, "__version__")

    def test_public_api(self):
        import webmctl

        for name in webmctl.__all__:
            assert hasattr(webmctl, name), name

    def test_import_core_modules(self):
        from webmctl.core import config, exceptions, logging, output, status, validation

        assert config is not None
        assert exceptions is not None
        assert logging is not None
        assert output is not None
        assert status is not None
        assert validation is not None

    def test_import_models(self):
        from webmctl.models import progress, settings

        assert progress is not None
        assert settings is not None

    def test_import_uploaders(self):
        from webmctl.uploaders import buffer, common, constants, coordinator, transport

        assert buffer is not None
        assert common is not None
        assert constants is not None
        assert coordinator is not None
        assert transport is not None

    def test_import_cli(self):
        from webmctl.cli import config_cmd, main, upload

        assert config_cmd is not None
        assert main is not None
        assert upload is not None
