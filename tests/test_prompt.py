"""Tests for the prompt_toolkit History adapter."""

from prompt_toolkit.history import History

from linehist.config import HISTORY_FILE, MappingConfig
from linehist.prompt import DEFAULT_HISTORY_PATH, LineHistory, get_history


class TestLineHistory:
    def test_is_prompt_toolkit_history(self, log):
        assert isinstance(LineHistory(log), History)

    def test_newest_first(self, history_path, make_log):
        history_path.write_text("1:first\n2:second\n", encoding="utf-8")
        history = LineHistory(make_log())
        assert list(history.load_history_strings()) == ["second", "first"]

    def test_loads_file_only_once(self, history_path, make_log):
        history_path.write_text("1:only\n", encoding="utf-8")
        history = LineHistory(make_log())
        list(history.load_history_strings())
        assert list(history.load_history_strings()) == ["only"]

    def test_store_string_goes_through_filters(self, make_log):
        log = make_log(path=None, history_ignore_dups=True)
        history = LineHistory(log)
        history.store_string("ls")
        history.store_string("ls")
        history.store_string("pwd")
        assert [e.line for e in log] == ["ls", "pwd"]

    def test_append_string_updates_loaded_strings(self, log):
        history = LineHistory(log)
        history.append_string("ls")
        assert history.get_strings() == ["ls"]
        assert log.get(0) == "ls"

    def test_save_persists(self, make_log, history_path):
        history = LineHistory(make_log())
        history.store_string("ls")
        assert history.save().success
        assert history_path.read_text(encoding="utf-8").endswith(":ls\n")


class TestGetHistory:
    def test_uses_configured_path(self, history_path):
        history = get_history(MappingConfig({HISTORY_FILE: history_path}))
        assert history.log.store.path == history_path

    def test_defaults_path(self):
        history = get_history()
        assert str(history.log.store.path) == DEFAULT_HISTORY_PATH


class TestRecallMatchesLog:
    def test_rejected_lines_not_recallable(self, make_log):
        log = make_log(path=None, history_ignore_space=True, history_ignore_dups=True)
        history = LineHistory(log)
        history.append_string(" secret")
        history.append_string("ls")
        history.append_string("ls")
        assert history.get_strings() == ["ls"]
        assert history.get_strings() == [e.line for e in log]

    def test_recall_holds_trimmed_text(self, make_log):
        log = make_log(path=None, history_reduce_blanks=True)
        history = LineHistory(log)
        history.append_string("  pwd  ")
        assert history.get_strings() == ["pwd"]


class TestLoadBeforeWrite:
    def test_store_then_save_keeps_existing_file(self, make_log, history_path):
        history_path.write_text("1:old1\n2:old2\n", encoding="utf-8")
        history = LineHistory(make_log())
        history.store_string("new")
        assert history.save().success
        bodies = [line.split(":", 1)[1] for line in history_path.read_text().splitlines()]
        assert bodies == ["old1", "old2", "new"]

    def test_save_alone_keeps_existing_file(self, make_log, history_path):
        history_path.write_text("1:old\n", encoding="utf-8")
        LineHistory(make_log()).save()
        assert history_path.read_text(encoding="utf-8") == "1:old\n"

    def test_append_string_loads_first(self, make_log, history_path):
        history_path.write_text("1:old\n", encoding="utf-8")
        history = LineHistory(make_log())
        history.append_string("new")
        assert [e.line for e in history.log] == ["old", "new"]

    def test_store_and_read_share_one_load(self, make_log, history_path):
        history_path.write_text("1:old\n", encoding="utf-8")
        history = LineHistory(make_log())
        history.store_string("a")
        list(history.load_history_strings())
        history.save()
        assert [e.line for e in history.log] == ["old", "a"]
