"""
tests/test_lead_service.py — Tests for the submission workflow and the
form config service, against an in-memory SQLite database.

The hot-lead notifier is always a MagicMock; no email is rendered or sent.
"""

from unittest.mock import MagicMock

import pytest

from app.db.models import FormLead, LeadStatus
from app.db.repository import get_stored_form_config, save_form_config_document
from app.forms.defaults import DEFAULT_FORM_CONFIG, default_form_config
from app.forms.models import Question, Thresholds
from app.forms.validation import FormConfigError
from app.services.form_config_service import (
    get_effective_config,
    push_default_config,
    save_form_config,
    sync_form_config,
)
from app.services.lead_service import (
    LeadNotFoundError,
    LeadProgress,
    delete_lead,
    set_lead_status,
    submit_progress,
    update_lead,
)


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.notify_hot_lead.return_value = True
    return mock


def progress(session_id="sess-1", **kwargs) -> LeadProgress:
    return LeadProgress(session_id=session_id, **kwargs)


# ── submit_progress ───────────────────────────────────────────────────────────

class TestSubmitProgress:
    def test_first_submission_creates_scored_lead(self, db, notifier):
        lead = submit_progress(
            db,
            progress(answers={"tipoNegocio": "Cleaning Services", "tempoNegocio": "1 to 3 years"}),
            notifier=notifier,
        )
        assert lead.id is not None
        assert lead.score_total == 20
        assert lead.score_tipo_negocio == 10
        assert lead.score_tempo_negocio == 10
        assert lead.classification == "DISQUALIFIED"
        notifier.notify_hot_lead.assert_not_called()

    def test_partial_submissions_accumulate_on_same_row(self, db, notifier):
        submit_progress(db, progress(answers={"nome": "Ana"}, question_number=1), notifier=notifier)
        lead = submit_progress(
            db,
            progress(answers={"tipoNegocio": "Landscaping"}, question_number=5),
            notifier=notifier,
        )
        assert db.query(FormLead).count() == 1
        assert lead.answers == {"nome": "Ana", "tipoNegocio": "Landscaping"}
        assert lead.nome == "Ana"
        assert lead.question_number == 5
        assert lead.score_total == 10

    def test_question_number_never_goes_back(self, db, notifier):
        submit_progress(db, progress(question_number=6), notifier=notifier)
        lead = submit_progress(db, progress(question_number=2), notifier=notifier)
        assert lead.question_number == 6

    def test_contact_and_custom_answers_stored(self, db, notifier):
        lead = submit_progress(
            db,
            progress(answers={
                "email": " ana@example.com ",
                "cidadeEstado": "Tampa, FL",
                "comoConheceu": "Instagram",
            }),
            notifier=notifier,
        )
        assert lead.email == "ana@example.com"
        assert lead.cidade_estado == "Tampa, FL"
        assert lead.custom_answers == {"comoConheceu": "Instagram"}

    def test_attribution_fields_stored(self, db, notifier):
        lead = submit_progress(
            db,
            progress(utm_source="google", utm_campaign="spring", url_origem="https://example.com/lp"),
            notifier=notifier,
        )
        assert lead.utm_source == "google"
        assert lead.utm_campaign == "spring"
        assert lead.url_origem == "https://example.com/lp"

    def test_completed_form_sets_status(self, db, notifier):
        lead = submit_progress(db, progress(form_completo=True, tempo_total_segundos=95), notifier=notifier)
        assert lead.form_completo is True
        assert lead.status == LeadStatus.COMPLETED
        assert lead.tempo_total_segundos == 95

    def test_terminal_lead_is_not_updated(self, db, notifier):
        lead = submit_progress(db, progress(answers={"tipoNegocio": "Painting"}), notifier=notifier)
        set_lead_status(db, lead.id, LeadStatus.CONVERTED)
        again = submit_progress(db, progress(answers={"tempoNegocio": "1 to 3 years"}), notifier=notifier)
        assert again.id == lead.id
        assert again.score_total == 10
        assert "tempoNegocio" not in again.answers

    def test_uses_stored_configuration(self, db, notifier):
        config = default_form_config()
        config.thresholds = Thresholds(hot=20, warm=10, cold=5)
        save_form_config(db, config)

        lead = submit_progress(
            db,
            progress(answers={"tipoNegocio": "Cleaning Services", "tempoNegocio": "1 to 3 years"}),
            notifier=notifier,
        )
        assert lead.classification == "HOT"


# ── Hot-lead notification ─────────────────────────────────────────────────────

class TestHotLeadNotification:
    def test_notifies_once_per_session(self, db, notifier, perfect_answers):
        first = submit_progress(db, progress(answers=perfect_answers), notifier=notifier)
        submit_progress(db, progress(answers={"nome": "Maria S."}), notifier=notifier)
        submit_progress(db, progress(form_completo=True), notifier=notifier)

        assert first.classification == "HOT"
        notifier.notify_hot_lead.assert_called_once()
        _, kwargs = notifier.notify_hot_lead.call_args
        assert kwargs["max_score"] == 70
        db.refresh(first)
        assert first.hot_notified is True
        assert first.hot_notified_at is not None

    def test_failed_alert_is_retried_on_next_submission(self, db, notifier, perfect_answers):
        notifier.notify_hot_lead.return_value = False
        lead = submit_progress(db, progress(answers=perfect_answers), notifier=notifier)
        db.refresh(lead)
        assert lead.hot_notified is False

        notifier.notify_hot_lead.return_value = True
        submit_progress(db, progress(question_number=11), notifier=notifier)
        assert notifier.notify_hot_lead.call_count == 2
        db.refresh(lead)
        assert lead.hot_notified is True

    def test_each_session_notified_separately(self, db, notifier, perfect_answers):
        submit_progress(db, progress("a", answers=perfect_answers), notifier=notifier)
        submit_progress(db, progress("b", answers=perfect_answers), notifier=notifier)
        assert notifier.notify_hot_lead.call_count == 2

    def test_warm_lead_not_notified(self, db, notifier, perfect_answers):
        perfect_answers.pop("localizacao")
        perfect_answers.pop("tipoNegocio")
        lead = submit_progress(db, progress(answers=perfect_answers), notifier=notifier)
        assert lead.classification == "WARM"
        notifier.notify_hot_lead.assert_not_called()


# ── set_lead_status ───────────────────────────────────────────────────────────

class TestSetLeadStatus:
    def test_unknown_lead_raises(self, db):
        with pytest.raises(LeadNotFoundError):
            set_lead_status(db, 999, LeadStatus.CONTACTED)

    def test_updates_status(self, db, notifier):
        lead = submit_progress(db, progress(), notifier=notifier)
        updated = set_lead_status(db, lead.id, LeadStatus.LOST)
        assert updated.status == LeadStatus.LOST


# ── update_lead / delete_lead ─────────────────────────────────────────────────

class TestAdminEdits:
    def test_notes_and_status_updated(self, db, notifier):
        lead = submit_progress(db, progress(), notifier=notifier)
        updated = update_lead(db, lead.id, status=LeadStatus.CONTACTED, observacoes="  Called on Monday ")
        assert updated.status == LeadStatus.CONTACTED
        assert updated.observacoes == "Called on Monday"

    def test_omitted_fields_untouched(self, db, notifier):
        lead = submit_progress(db, progress(), notifier=notifier)
        update_lead(db, lead.id, observacoes="Keep")
        updated = update_lead(db, lead.id, status=LeadStatus.LOST)
        assert updated.observacoes == "Keep"

    def test_manual_hot_flag_suppresses_alert(self, db, notifier, perfect_answers):
        lead = submit_progress(db, progress(answers={"nome": "Ana"}), notifier=notifier)
        update_lead(db, lead.id, hot_notified=True)
        assert lead.hot_notified_at is not None
        submit_progress(db, progress(answers=perfect_answers), notifier=notifier)
        notifier.notify_hot_lead.assert_not_called()

    def test_clearing_hot_flag_allows_new_alert(self, db, notifier, perfect_answers):
        lead = submit_progress(db, progress(answers=perfect_answers), notifier=notifier)
        update_lead(db, lead.id, hot_notified=False)
        assert lead.hot_notified_at is None
        submit_progress(db, progress(question_number=11), notifier=notifier)
        assert notifier.notify_hot_lead.call_count == 2

    def test_unknown_lead_raises(self, db):
        with pytest.raises(LeadNotFoundError):
            update_lead(db, 404, observacoes="x")
        with pytest.raises(LeadNotFoundError):
            delete_lead(db, 404)

    def test_delete_removes_lead(self, db, notifier):
        lead = submit_progress(db, progress(), notifier=notifier)
        delete_lead(db, lead.id)
        assert db.query(FormLead).count() == 0


# ── Form config service ───────────────────────────────────────────────────────

class TestFormConfigService:
    def test_effective_config_defaults_to_canonical(self, db):
        assert get_effective_config(db) == DEFAULT_FORM_CONFIG

    def test_effective_config_recomputes_stale_max_score(self, db):
        document = DEFAULT_FORM_CONFIG.to_json_dict()
        document["maxScore"] = 82
        save_form_config_document(db, document)
        assert get_effective_config(db).max_score == 70

    def test_save_rejects_invalid_config(self, db):
        config = default_form_config()
        config.thresholds = Thresholds(hot=10, warm=50, cold=30)
        with pytest.raises(FormConfigError):
            save_form_config(db, config)
        assert get_stored_form_config(db) is None

    def test_save_recomputes_max_score(self, db):
        config = default_form_config()
        config.max_score = 1
        saved = save_form_config(db, config)
        assert saved.max_score == 70
        assert get_stored_form_config(db)["maxScore"] == 70

    def test_sync_merges_stored_config(self, db):
        save_form_config_document(db, {
            "questions": [
                {"id": "localizacao", "order": 1, "type": "select",
                 "options": [{"value": "US", "label": "US", "points": 10}]},
                {"id": "cidadeEstado", "order": 2, "title": "City?", "type": "text"},
                {"id": "comoConheceu", "order": 3, "title": "How did you find us?", "type": "text"},
            ],
            "maxScore": 10,
            "thresholds": {"hot": 60, "warm": 40, "cold": 20},
        })
        merged = sync_form_config(db)
        stored_ids = [q["id"] for q in get_stored_form_config(db)["questions"]]
        assert "cidadeEstado" not in stored_ids
        assert stored_ids[-1] == "comoConheceu"
        assert merged.thresholds.hot == 60
        assert merged.max_score == 70

    def test_sync_rejects_unfixable_custom_question(self, db):
        save_form_config_document(db, {"questions": [{"id": "nota", "type": "rating"}]})
        with pytest.raises(FormConfigError):
            sync_form_config(db)

    def test_push_default_config(self, db):
        save_form_config_document(db, {"questions": [{"id": "custom", "type": "text"}]})
        push_default_config(db)
        stored_ids = [q["id"] for q in get_stored_form_config(db)["questions"]]
        assert stored_ids == [q.id for q in DEFAULT_FORM_CONFIG.questions]

    def test_effective_config_keeps_custom_questions(self, db):
        config = default_form_config()
        config.questions.append(Question(id="comoConheceu", order=11, title="How?", type="text"))
        save_form_config(db, config)
        assert get_effective_config(db).get_question("comoConheceu") is not None
