"""
Pytest configuration and shared fixtures.

This module contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import json
import os

# Import project modules for testing
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from tessclient.core.client import Client
from tessclient.core.config import ClientConfig
from tessclient.ocr.base import OCREngine


class RecordingEngine(OCREngine):
    """
    In-memory engine that records every call made to it.

    Image handles are plain dicts describing where the image came from.
    """

    def __init__(self, text="\nHello World\n", hocr="<div class='ocr_page'></div>",
                 init_code=0, rejected_variables=()):
        super().__init__("recording")
        self.text = text
        self.hocr = hocr
        self.init_code = init_code
        self.rejected_variables = set(rejected_variables)

        self.calls = []
        self.init_calls = []
        self.bound_variables = []
        self.destroyed = []
        self.created_images = []
        self.page_seg_modes = []
        self.bound_image = None
        self.freed = 0
        self.cleared = 0
        self.cache_cleared = 0

    def init(self, languages, config_path, tessdata_prefix=None):
        self.calls.append('init')
        self.init_calls.append((languages, config_path, tessdata_prefix))
        return self.init_code

    def set_image_from_path(self, path):
        self.calls.append('set_image_from_path')
        handle = {'source': 'path', 'path': path}
        self.created_images.append(handle)
        self.bound_image = handle
        return handle

    def set_image_from_buffer(self, data):
        self.calls.append('set_image_from_buffer')
        handle = {'source': 'buffer', 'size': len(data)}
        self.created_images.append(handle)
        self.bound_image = handle
        return handle

    def rebind_image(self, handle):
        self.calls.append('rebind_image')
        self.bound_image = handle

    def destroy_image(self, handle):
        self.calls.append('destroy_image')
        self.destroyed.append(handle)

    def set_variable(self, key, value):
        self.calls.append('set_variable')
        if key in self.rejected_variables:
            return False
        self.bound_variables.append((key, value))
        return True

    def set_page_seg_mode(self, mode):
        self.calls.append('set_page_seg_mode')
        self.page_seg_modes.append(mode)

    def get_utf8_text(self):
        self.calls.append('get_utf8_text')
        return self.text

    def get_hocr_text(self):
        self.calls.append('get_hocr_text')
        return self.hocr

    def clear(self):
        self.calls.append('clear')
        self.cleared += 1

    def clear_persistent_cache(self):
        self.calls.append('clear_persistent_cache')
        self.cache_cleared += 1

    def version(self):
        self.calls.append('version')
        return "5.3.0"

    def free(self):
        self.calls.append('free')
        self.freed += 1


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def make_engine():
    """Factory for recording engines with custom behaviour."""
    return RecordingEngine


@pytest.fixture
def recording_engine():
    """Create a recording engine for client tests."""
    return RecordingEngine()


@pytest.fixture
def client(recording_engine):
    """Create a client driving the recording engine."""
    client = Client(lambda: recording_engine)
    yield client
    client.close()


@pytest.fixture
def sample_image_file(temp_dir):
    """Create a sample image file for testing."""
    from PIL import Image, ImageDraw

    img = Image.new('RGB', (300, 100), color='white')
    draw = ImageDraw.Draw(img)
    draw.text((10, 30), 'Hello World', fill='black')

    image_file = temp_dir / "sample.png"
    img.save(image_file)

    return image_file


@pytest.fixture
def sample_image_bytes(sample_image_file):
    """PNG bytes of the sample image."""
    return sample_image_file.read_bytes()


@pytest.fixture
def tess_config_file(temp_dir):
    """Create a Tesseract config file."""
    config_file = temp_dir / "digits.cfg"
    config_file.write_text("tessedit_char_whitelist 0123456789\n", encoding='utf-8')
    return config_file


@pytest.fixture
def sample_config():
    """Create a sample client configuration."""
    return ClientConfig(
        languages=["eng", "deu"],
        page_seg_mode=6,
        variables={"preserve_interword_spaces": "1"},
        trim=False
    )


@pytest.fixture
def client_config_file(temp_dir):
    """Create a temporary client config file."""
    config_file = temp_dir / "tess-client.json"
    config_data = {
        "languages": ["eng", "fra"],
        "page_seg_mode": 7,
        "trim": False,
        "log_level": "DEBUG"
    }

    with open(config_file, 'w') as f:
        json.dump(config_data, f)

    return config_file


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        'TESS_CLIENT_LANGUAGES': 'eng+jpn',
        'TESSDATA_PREFIX': '/opt/tessdata',
        'TESSERACT_CMD': '/usr/local/bin/tesseract',
        'TESS_CLIENT_PSM': '11',
        'TESS_CLIENT_TRIM': 'false',
        'TESS_CLIENT_LOG_LEVEL': 'DEBUG'
    }

    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def caplog_debug(caplog):
    """Set logging level to DEBUG for tests."""
    import logging
    caplog.set_level(logging.DEBUG)
    return caplog


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
