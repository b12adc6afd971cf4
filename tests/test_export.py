"""
Tests for result aggregation and the on-disk artifacts.
"""

import csv
import json
from datetime import datetime

import pytest

from product_crawler.errors import PersistenceError
from product_crawler.export.aggregator import ResultAggregator
from product_crawler.export.base import domain_slug
from product_crawler.export.csv_exporter import CSVExporter
from product_crawler.export.json_exporter import JSONExporter

TATA = "https://www.tatacliq.com/"
VIRGIO = "https://www.virgio.com/"


class TestAggregator:

    def test_accept_dedupes_preserving_order(self):
        agg = ResultAggregator([TATA])
        assert agg.accept(TATA, ["u2", "u1", "u2"]) == 2
        assert agg.accept(TATA, ["u1", "u3"]) == 1
        assert agg.results == {TATA: ["u2", "u1", "u3"]}
        assert agg.total == 3

    def test_domains_start_empty(self):
        agg = ResultAggregator([TATA, VIRGIO])
        assert agg.results == {TATA: [], VIRGIO: []}

    def test_results_is_a_copy(self):
        agg = ResultAggregator([TATA])
        agg.results[TATA].append("x")
        assert agg.results[TATA] == []


class TestJSONExporter:

    def test_writes_domain_files_and_summary(self, tmp_path):
        out = tmp_path / "nested" / "results"
        agg = ResultAggregator([TATA, VIRGIO])
        agg.accept(TATA, ["https://www.tatacliq.com/p-mp1", "https://www.tatacliq.com/p-mp2"])

        result = agg.persist(str(out))

        tata_file = out / "www_tatacliq_com_products.json"
        assert result.domain_files[TATA] == str(tata_file)
        data = json.loads(tata_file.read_text(encoding="utf-8"))
        assert data["domain"] == TATA
        assert data["productCount"] == 2
        assert data["products"] == ["https://www.tatacliq.com/p-mp1", "https://www.tatacliq.com/p-mp2"]
        assert data["crawlDate"].endswith("Z")
        datetime.fromisoformat(data["crawlDate"].replace("Z", "+00:00"))

        virgio = json.loads((out / "www_virgio_com_products.json").read_text(encoding="utf-8"))
        assert virgio["productCount"] == 0

        summary = json.loads((out / "all_products.json").read_text(encoding="utf-8"))
        assert summary == {TATA: data["products"], VIRGIO: []}
        assert result.summary_file == str(out / "all_products.json")

    def test_write_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            JSONExporter().export({TATA: []}, str(blocker / "results"))

    def test_domain_slug(self):
        assert domain_slug("https://www.westside.com/") == "www_westside_com"
        assert domain_slug("not a url") == "not_a_url"


class TestCSVExporter:

    def test_rows(self, tmp_path):
        result = CSVExporter().export({TATA: ["a", "b"], VIRGIO: ["c"]}, str(tmp_path))
        with open(result.summary_file, encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
        assert rows == [["domain", "url"], [TATA, "a"], [TATA, "b"], [VIRGIO, "c"]]
