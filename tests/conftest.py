import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from catalog import WordCatalog
from config import Config


def write_source(directory, name, words):
    path = os.path.join(str(directory), name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(words, f, ensure_ascii=False)
    return path


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    write_source(directory, "2_syllable.json", ["a b", "c d"])
    write_source(directory, "3_syllable.json", ["e f g"])
    return directory


@pytest.fixture
def small_catalog():
    return WordCatalog({2: ["a b", "c d"], 3: ["e f g"]})


@pytest.fixture
def app(tmp_path, data_dir):
    class TestConfig(Config):
        TESTING = True
        DATA_DIR = str(data_dir)
        PERFORMANCE_DIR = str(tmp_path / "performance")
        REVIEW_LOG_PATH = str(tmp_path / "words_needs_to_check.log")
        DEBUG_ENDPOINTS = True
        MIRROR_PREFIX = "/aren"

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_record():
    return {
        "sessionId": "1760000000000-abc123xyz",
        "startedAt": "2026-10-18T09:00:00.000Z",
        "finishedAt": "2026-10-18T09:00:06.000Z",
        "mode": "2",
        "targetCount": 3,
        "durations": [2.5, 3.5],
        "wordsShown": ["ka lem", "ki tap", "ör nek"],
    }
