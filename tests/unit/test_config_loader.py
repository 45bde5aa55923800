import pytest

from src.config_loader import Config, random_seed_from_env


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / "nope.yaml"))


def test_empty_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("DGS_RANDOM_SEED", raising=False)
    config = Config(_write(tmp_path, ""))
    assert config.dgs_overrides == {}
    assert config.random_seed is None
    assert config.log_level == "INFO"
    assert config.log_file is None
    assert config.genre_edges_path is None
    assert config.get("dgs", "anything", default=3) == 3


def test_sections(tmp_path, monkeypatch):
    monkeypatch.delenv("DGS_RANDOM_SEED", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    config = Config(
        _write(
            tmp_path,
            "dgs:\n"
            "  random_seed: 7\n"
            "  selection:\n"
            "    display_count: 9\n"
            "  target_filter:\n"
            "    boost_round: 8\n"
            "logging:\n"
            "  level: debug\n"
            "genre:\n"
            "  edges_path: edges.yaml\n",
        )
    )
    assert config.random_seed == 7
    assert config.dgs_overrides == {"selection": {"display_count": 9}, "target_filter": {"boost_round": 8}}
    assert config.log_level == "DEBUG"
    assert config.genre_edges_path == "edges.yaml"


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("DGS_RANDOM_SEED", "99")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_FILE", "logs/run.log")
    config = Config(_write(tmp_path, "dgs:\n  random_seed: 7\n"))
    assert config.random_seed == 99
    assert config.log_level == "WARNING"
    assert config.log_file == "logs/run.log"


def test_bad_environment_seed(tmp_path, monkeypatch):
    monkeypatch.setenv("DGS_RANDOM_SEED", "abc")
    config = Config(_write(tmp_path, ""))
    with pytest.raises(ValueError):
        _ = config.random_seed


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "dgs: 5\n",
        "dgs:\n  selection: [1, 2]\n",
        "dgs:\n  random_seed: seven\n",
    ],
)
def test_malformed_sections(tmp_path, text):
    with pytest.raises(ValueError):
        Config(_write(tmp_path, text))


def test_example_config_is_valid():
    from pathlib import Path

    from src.dgs.config import default_dgs_config

    example = Path(__file__).resolve().parents[2] / "config.example.yaml"
    config = Config(str(example))
    dgs = default_dgs_config(config.dgs_overrides)
    assert dgs.selection.display_count == 9


def test_random_seed_from_env(monkeypatch):
    monkeypatch.delenv("DGS_RANDOM_SEED", raising=False)
    assert random_seed_from_env() is None
    monkeypatch.setenv("DGS_RANDOM_SEED", "42")
    assert random_seed_from_env() == 42
