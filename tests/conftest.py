# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from csvbook.logging.init import reset_logging

DEMO_CSV = 'Nome,Matricola,Importo\nMario,123,"1,50"\nLuigi,456,2000\n'


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "out").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("CSVBOOK_OUTPUT_DIR", "CSVBOOK_SINK", "CSVBOOK_NUMERIC_POLICY"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
numeric_policy: all_numbers
exclusions:
  exact: [Matricola]
  substring: ["nr."]
sink: file
output_directory: ./out
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "convert.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def demo_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "demo.csv"
    f.write_text(DEMO_CSV, encoding="utf-8")
    return f


@pytest.fixture()
def csv_files(temp_workdir: Path) -> list[Path]:
    files = []
    contents = {
        "a_people.csv": "Nome;Eta;Saldo\nAnna;30;10,5\nBruno;41;-3,25\n",
        "b_orders.csv": "Nr. ordine,Totale\n1,\"12,40\"\n2,\"7,00\"\n",
    }
    for name, text in contents.items():
        f = temp_workdir / "data" / name
        f.write_text(text, encoding="utf-8")
        files.append(f)
    return files
