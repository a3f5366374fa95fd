"""
Unit tests for the command line interface.

The Tesseract engine is replaced by the recording engine, and logging setup
is patched so tests do not reconfigure the package logger.
"""

import os

import pytest
from unittest.mock import patch

from tessclient import __version__, cli
from tessclient.core.config import ClientConfig, ConfigManager
from tessclient.ocr.base import PageSegMode


@pytest.fixture
def engines(make_engine):
    """Patch TesseractEngine in the CLI and client modules, collecting created engines."""
    created = []

    def factory(*args, **kwargs):
        engine = make_engine()
        created.append(engine)
        return engine

    with patch('tessclient.cli.TesseractEngine', side_effect=factory), \
         patch('tessclient.core.client.TesseractEngine', side_effect=factory), \
         patch('tessclient.cli.setup_logger'), \
         patch('tessclient.cli.get_config', return_value=ClientConfig()):
        yield created


class TestParser:
    """Test argument parsing."""

    def test_text_arguments(self):
        args = cli.build_parser().parse_args([
            "text", "scan.png", "-l", "eng", "-l", "deu", "--psm", "6",
            "-c", "tessedit_char_whitelist=0123456789", "--no-trim"
        ])
        assert args.cmd == "text"
        assert args.image == "scan.png"
        assert args.languages == ["eng", "deu"]
        assert args.psm == 6
        assert args.variables == [("tessedit_char_whitelist", "0123456789")]
        assert args.no_trim is True

    def test_invalid_variable(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["text", "scan.png", "-c", "novalue"])

    def test_invalid_psm(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["text", "scan.png", "--psm", "14"])

    def test_program_version(self, capsys):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--version"])
        assert capsys.readouterr().out.strip() == f"tess-client {__version__}"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestMain:
    """Test command execution."""

    def test_text(self, engines, sample_image_file, capsys):
        status = cli.main(["text", str(sample_image_file), "-l", "eng", "--psm", "7",
                           "--whitelist", "abc"])

        assert status == 0
        assert capsys.readouterr().out == "Hello World\n"
        engine = engines[0]
        assert engine.init_calls == [("eng", None, None)]
        assert engine.page_seg_modes == [PageSegMode.SINGLE_LINE]
        assert engine.bound_variables == [("tessedit_char_whitelist", "abc")]
        assert engine.freed == 1

    def test_text_no_trim(self, engines, sample_image_file, capsys):
        cli.main(["text", str(sample_image_file), "--no-trim"])
        assert capsys.readouterr().out == "\nHello World\n\n"

    def test_hocr(self, engines, sample_image_file, capsys):
        status = cli.main(["hocr", str(sample_image_file)])
        assert status == 0
        assert "ocr_page" in capsys.readouterr().out
        assert 'get_hocr_text' in engines[0].calls

    def test_missing_image(self, engines, temp_dir, capsys):
        status = cli.main(["text", str(temp_dir / "missing.png")])

        assert status == 1
        assert "does not exist" in capsys.readouterr().err
        assert engines[0].freed == 1

    def test_config_directory(self, engines, sample_image_file, temp_dir, capsys):
        status = cli.main(["text", str(sample_image_file), "--config", str(temp_dir)])

        assert status == 1
        assert "directory" in capsys.readouterr().err
        assert engines[0].freed == 1

    def test_invalid_page_seg_mode_from_environment(self, engines, sample_image_file,
                                                    temp_dir, capsys):
        env = {'TESS_CLIENT_PSM': '99'}
        with patch.object(ConfigManager, 'CONFIG_FILE', str(temp_dir / "absent.json")), \
             patch.dict(os.environ, env, clear=True), \
             patch('tessclient.cli.get_config', side_effect=ConfigManager.load_config):
            status = cli.main(["text", str(sample_image_file)])

        assert status == 0
        assert capsys.readouterr().out == "Hello World\n"
        assert engines[0].page_seg_modes == []

    def test_version(self, engines, capsys):
        assert cli.main(["version"]) == 0
        assert capsys.readouterr().out == "5.3.0\n"
        assert engines[0].freed == 1

    def test_clear_cache(self, engines):
        assert cli.main(["clear-cache"]) == 0
        assert engines[0].cache_cleared == 1
