import json

from trip_consensus import batch
from trip_consensus.config import EngineSettings, load_settings
from trip_consensus.report import parse_report_budgets


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("TRIP_CONSENSUS_PROVIDER_TIMEOUT", "2.5")
    monkeypatch.setenv("TRIP_CONSENSUS_SEED", "11")
    monkeypatch.setenv("TRIP_CONSENSUS_RECOMMENDATION_COUNT", "3")
    monkeypatch.setenv("TRIP_CONSENSUS_ALLOWED_ORIGINS", "http://localhost:5173, https://trips.example")
    monkeypatch.setenv("TRIP_CONSENSUS_CURRENCY", "eur")
    monkeypatch.setenv("TICKETMASTER_API_KEY", "tm")
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)

    settings = load_settings()

    assert settings.provider_timeout == 2.5
    assert settings.seed == 11
    assert settings.recommendation_count == 3
    assert settings.allowed_origins == ("http://localhost:5173", "https://trips.example")
    assert settings.currency == "EUR"
    assert settings.has_live_providers


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TRIP_CONSENSUS_PROVIDER_TIMEOUT", "-1")
    monkeypatch.setenv("TRIP_CONSENSUS_SEED", "seven")
    monkeypatch.setenv("TRIP_CONSENSUS_ALLOWED_ORIGINS", " , ")
    monkeypatch.delenv("TICKETMASTER_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)

    settings = load_settings()
    defaults = EngineSettings()

    assert settings.provider_timeout == defaults.provider_timeout
    assert settings.seed == defaults.seed
    assert settings.allowed_origins == ("*",)
    assert not settings.has_live_providers


def _write_responses(tmp_path):
    path = tmp_path / "responses.json"
    path.write_text(
        json.dumps(
            {
                "responses": [
                    {"member_id": "a", "answers": {"location_preferences": ["Boston", "NYC"], "trip_budget": 800}},
                    {"member_id": "b", "answers": {"location_preferences": ["NYC"], "departure_city": "Miami"}},
                ],
                "members": [{"member_id": "a", "name": "Alex", "departure_city": "Denver"}],
            }
        ),
        encoding="utf-8",
    )
    return path


def test_batch_prints_json(tmp_path, capsys):
    path = _write_responses(tmp_path)

    assert batch.main([str(path), "--offline", "--count", "2"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert [rec["destination"]["label"] for rec in output["recommendations"]] == ["NYC", "Boston"]
    assert [cost["member_id"] for cost in output["recommendations"][0]["member_costs"]] == ["a"]


def test_batch_prints_markdown_report(tmp_path, capsys):
    path = _write_responses(tmp_path)

    assert batch.main([str(path), "--offline", "--format", "markdown", "--count", "1"]) == 0

    report = capsys.readouterr().out
    assert report.startswith("# Group Trip Recommendations")
    assert len(parse_report_budgets(report)) == 1


def test_batch_reports_unreadable_input(tmp_path, capsys):
    missing = tmp_path / "nope.json"
    assert batch.main([str(missing), "--offline"]) == 2

    broken = tmp_path / "broken.json"
    broken.write_text("[{\"answers\": {}}]", encoding="utf-8")
    assert batch.main([str(broken), "--offline"]) == 2
    assert "Invalid responses file" in capsys.readouterr().err
