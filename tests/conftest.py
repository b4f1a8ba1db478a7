"""Shared fixtures for the test suite."""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from explorer_api.config import Settings
from explorer_api.data_access import DatasetStore
from explorer_api.main import create_app

DATASETS = ["missingdateofbirth", "missingdateofdeath", "missingplaceofbirth", "catfacts"]

METADATA_SQL = """
CREATE TABLE datasetname (name TEXT);
INSERT INTO datasetname VALUES ('missingdateofbirth'), ('catfacts');

CREATE TABLE missingdateofbirthepoch (epoch TEXT);
INSERT INTO missingdateofbirthepoch VALUES ('20200101'), ('20200201');

CREATE TABLE catfactsepoch (epoch TEXT);
INSERT INTO catfactsepoch VALUES ('20200301');

-- registered but nothing published yet
CREATE TABLE missingplaceofbirthepoch (epoch TEXT);
"""

DATASET_SQL = """
CREATE TABLE missingdateofbirth_20200101 (qNumber TEXT, label TEXT, languages TEXT);
INSERT INTO missingdateofbirth_20200101 VALUES ('Q1', 'Universe', 'en');

CREATE TABLE missingdateofbirth_20200201 (qNumber TEXT, label TEXT, languages TEXT);
INSERT INTO missingdateofbirth_20200201 VALUES
    ('Q42', 'Douglas Adams', 'en,de'),
    ('Q7', 'Seven', 'pt'),
    ('q7', 'seven (lower)', 'fr'),
    ('Q100', 'Hundred', 'zh_hans');

CREATE TABLE updatecount_stats (epoch TEXT, addedtime TEXT, updatecount INTEGER);
INSERT INTO updatecount_stats VALUES
    ('20200101', '2020-01-05 00:00:00', 3),
    ('20200201', '2020-02-02 00:00:00', 5),
    ('20200201', '2020-02-03 00:00:00', 9);

CREATE TABLE missingdateofbirth_20200201_logging (user TEXT, decision TEXT, changetime TEXT);
INSERT INTO missingdateofbirth_20200201_logging VALUES
    ('alice', 'approve', '2024-01-01 10:00:00'),
    ('alice', 'approve', '2024-01-01 11:00:00'),
    ('bob',   'reject',  '2024-01-01 12:00:00'),
    ('alice', 'approve', '2024-01-02 09:00:00'),
    ('alice', 'approve', '2024-01-02 09:30:00'),
    ('alice', 'approve', '2024-01-02 10:00:00'),
    ('bob',   'reject',  '2024-01-02 11:00:00'),
    ('carol', 'approve', '2024-01-02 12:00:00'),
    ('alice', 'reject',  '2024-01-03 08:00:00'),
    ('bob',   'reject',  '2024-01-03 09:00:00');
"""


def _write_db(path, script):
    conn = sqlite3.connect(str(path))
    conn.executescript(script)
    conn.commit()
    conn.close()


@pytest.fixture
def data_dir(tmp_path):
    """Directory of schema files: metadata, one populated dataset, one empty dataset."""
    _write_db(tmp_path / "wikiloop.db", METADATA_SQL)
    _write_db(tmp_path / "missingdateofbirth.db", DATASET_SQL)
    _write_db(tmp_path / "catfacts.db", "CREATE TABLE catfacts_20200301 (fact TEXT);")
    return tmp_path


@pytest.fixture
def test_settings(data_dir):
    return Settings(
        DATA_DIR=str(data_dir),
        METADATA_SCHEMA="wikiloop",
        DATASETS=list(DATASETS),
        DB_TIMEOUT=5,
    )


@pytest.fixture
def store(data_dir):
    """DatasetStore over the fixture schema files."""
    s = DatasetStore(
        data_dir=str(data_dir),
        metadata_schema="wikiloop",
        datasets=DATASETS,
        timeout=5,
    )
    yield s
    s.close()


@pytest.fixture
def client(test_settings):
    """TestClient over an app serving the fixture store."""
    with TestClient(create_app(test_settings)) as c:
        yield c
