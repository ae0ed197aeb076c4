"""
Unit Tests for the notification channel and the AI explanation backend
"""

from types import SimpleNamespace

from qcm_simulator.models.notice import NoticeKind
from qcm_simulator.services import explainer
from qcm_simulator.services.notifier import Notifier


class TestNotifier:

    def test_emit_queues_and_drain_empties(self):
        notifier = Notifier()
        notifier.success("saved")
        notifier.info("hello")
        notices = notifier.drain()
        assert [(n.kind, n.message) for n in notices] == [
            (NoticeKind.SUCCESS, "saved"),
            (NoticeKind.INFO, "hello"),
        ]
        assert notifier.drain() == []

    def test_backlog_is_bounded(self):
        notifier = Notifier(backlog=2)
        for i in range(5):
            notifier.error(f"e{i}")
        assert [n.message for n in notifier.drain()] == ["e3", "e4"]

    def test_subscriber_errors_do_not_break_emit(self):
        notifier = Notifier()
        seen = []

        def broken(notice):
            raise ValueError("renderer gone")

        notifier.subscribe(broken)
        notifier.subscribe(seen.append)
        notifier.info("still delivered")
        assert [n.message for n in seen] == ["still delivered"]


class TestExplainer:

    def test_explain_without_key_is_demo(self):
        result = explainer.explain("What?", "b")
        assert result.is_demo is True
        assert result.insight == explainer.DEMO_INSIGHT
        assert result.correct_answer == "b"

    def test_explain_with_client_uses_model_answer(self, monkeypatch):
        captured = {}

        def create(**kwargs):
            captured.update(kwargs)
            message = SimpleNamespace(content="  Because b is right.  ")
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        monkeypatch.setattr(explainer, "_make_client", lambda api_key: fake)

        result = explainer.explain("What?", "b", api_key="sk-test")
        assert result.is_demo is False
        assert result.insight == "Because b is right."
        assert "What?" in captured["messages"][1]["content"]
