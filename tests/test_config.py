import json

import pytest

from classbank.config import DEFAULT_ACTION_SCORES, DEFAULT_TEACHER, ImportConfig, config_from_dict, load_config, save_config


class TestImportConfig:
    def test_default_is_structural(self):
        assert ImportConfig().is_default()
        assert ImportConfig(dict(DEFAULT_ACTION_SCORES)).is_default()
        assert not ImportConfig().with_action("ניקיון כיתה", 2).is_default()

    def test_removing_and_restoring_an_action(self):
        cfg = ImportConfig().without_action("איחור")
        assert "איחור" not in cfg.action_scores
        assert not cfg.is_default()
        assert cfg.with_action("איחור", -1).is_default()

    def test_actions_are_ordered_longest_first(self):
        order = ImportConfig().ordered_actions
        assert [len(a) for a in order] == sorted((len(a) for a in order), reverse=True)
        assert order.index("הפרעה במהלך שיעור") < order.index("הפרעה")
        assert order.index("חוצפה/סרבנות") < order.index("חוצפה")

    def test_replace_all_scores(self):
        cfg = ImportConfig(default_teacher="מחנכת", max_header_scan_rows=20)
        new = cfg.with_scores({"איחור": -2, "ניקיון כיתה": 1})
        assert dict(new.action_scores) == {"איחור": -2, "ניקיון כיתה": 1}
        assert new.ordered_actions == ("ניקיון כיתה", "איחור")
        assert new.default_teacher == "מחנכת"
        assert new.max_header_scan_rows == 20
        assert cfg.is_default()

    def test_scores_are_read_only(self):
        cfg = ImportConfig()
        with pytest.raises(TypeError):
            cfg.action_scores["איחור"] = -5

    def test_caller_dict_is_copied(self):
        scores = {"איחור": -1}
        cfg = ImportConfig(scores)
        scores["איחור"] = -10
        assert cfg.score_of("איחור") == -1.0


class TestConfigFromDict:
    @pytest.mark.parametrize("payload", [None, [], [1, 2], "config", 7])
    def test_non_object_payload_gives_default(self, payload):
        cfg = config_from_dict(payload)
        assert cfg.is_default()
        assert cfg.default_teacher == DEFAULT_TEACHER

    def test_invalid_scores_are_dropped(self):
        cfg = config_from_dict({"action_scores": {"מילה טובה": 2, "שבור": "x", "": 1, "דגל": True}})
        assert dict(cfg.action_scores) == {"מילה טובה": 2.0}

    def test_fields(self):
        cfg = config_from_dict({"action_scores": {"איחור": -2}, "default_teacher": "מחנכת", "max_header_scan_rows": 10})
        assert cfg.default_teacher == "מחנכת"
        assert cfg.max_header_scan_rows == 10

    def test_bad_scan_window_falls_back(self):
        assert config_from_dict({"max_header_scan_rows": 0}).max_header_scan_rows == 80
        assert config_from_dict({"max_header_scan_rows": "20"}).max_header_scan_rows == 80


class TestConfigFile:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "config.json"
        cfg = ImportConfig().with_action("ניקיון כיתה", 2)
        save_config(cfg, path)
        loaded = load_config(path)
        assert dict(loaded.action_scores) == dict(cfg.action_scores)
        assert loaded.default_teacher == cfg.default_teacher

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "missing.json").is_default()

    def test_array_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps([{"action_scores": {}}]), encoding="utf-8")
        assert load_config(path).is_default()

    def test_broken_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_config(path).is_default()
