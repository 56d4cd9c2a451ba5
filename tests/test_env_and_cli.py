"""Tests for environment helpers and the predict CLI."""

import json

import pytest

import cli_predict
from env import Settings, env_str, load_settings
from structured_prompting import Example

from conftest import Answer, StubRequester


class TestEnv:
    def test_env_str(self, monkeypatch):
        monkeypatch.setenv("NAME", "value")
        assert env_str("NAME") == "value"
        monkeypatch.delenv("NAME")
        assert env_str("NAME", "fallback") == "fallback"

    def test_load_settings(self, monkeypatch):
        monkeypatch.setenv("PROVIDER", " OpenAI_Chat ")
        monkeypatch.setenv("LLM_MODEL", "gpt-x")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert load_settings() == Settings(provider="openai_chat", model="gpt-x", log_level="DEBUG")

    def test_load_settings_defaults(self, monkeypatch):
        for name in ("PROVIDER", "LLM_MODEL", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        assert load_settings() == Settings()


class TestCli:
    def test_load_import_path(self):
        assert cli_predict.load_import_path("conftest:Answer") is Answer
        assert cli_predict.load_import_path("conftest.Answer") is Answer

    def test_load_import_path_invalid(self):
        with pytest.raises(ValueError):
            cli_predict.load_import_path("Answer")

    def test_load_examples(self, tmp_path):
        path = tmp_path / "examples.json"
        path.write_text(json.dumps([
            {"input": "q1", "output": {"answer": "a1"}},
            {"input": "q2", "output": '{"answer": "a2"}'},
        ]))
        assert cli_predict.load_examples(str(path)) == [
            Example(input="q1", output='{"answer": "a1"}'),
            Example(input="q2", output='{"answer": "a2"}'),
        ]

    def test_show_prompt(self, capsys, monkeypatch):
        monkeypatch.setattr(cli_predict, "load_env", lambda: None)
        assert cli_predict.main(["hello", "--schema", "conftest:Answer", "--show-prompt"]) == 0
        assert '"answer"' in capsys.readouterr().out

    def test_predict(self, capsys, monkeypatch):
        monkeypatch.setattr(cli_predict, "load_env", lambda: None)
        monkeypatch.setattr(cli_predict, "get_provider", lambda name, model=None: StubRequester('{"answer": "ok"}'))
        assert cli_predict.main(["hello", "--schema", "conftest:Answer"]) == 0
        assert json.loads(capsys.readouterr().out) == {"answer": "ok"}

    def test_predict_error_exit_code(self, capsys, monkeypatch):
        monkeypatch.setattr(cli_predict, "load_env", lambda: None)
        monkeypatch.setattr(cli_predict, "get_provider", lambda name, model=None: StubRequester("not json"))
        assert cli_predict.main(["hello", "--schema", "conftest:Answer"]) == 1
        assert "not valid JSON" in capsys.readouterr().err
