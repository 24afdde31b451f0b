"""Tests for the interactive review sessions."""

from __future__ import annotations

import pytest
from conftest import ScriptedPrompter, console_text

from review_classifier import session as session_module
from review_classifier.exceptions import (
    InvalidInputError,
    MalformedRecordError,
    ReviewClassifierError,
)
from review_classifier.io import load_staging_reviews, load_training_dataset
from review_classifier.ml import SentimentModel, load
from review_classifier.session import (
    CONFIRM_PROMPT,
    CORRECTION_PROMPT,
    ReviewOutcome,
    ReviewSession,
    ReviewState,
    StagedReviewFlow,
    parse_confirmation,
    parse_correction,
)


class FixedModel(SentimentModel):
    """Model stub that always predicts the same label."""

    def __init__(self, label: bool):
        self.label = label
        self.retrained_with = None

    def predict(self, text: str) -> bool:
        return self.label

    def retrain(self, records) -> None:
        self.retrained_with = list(records)


def make_session(paths, context, console, answers):
    prompter = ScriptedPrompter(answers)
    return ReviewSession(context, paths, prompter=prompter, console=console), prompter


def stage(paths, *reviews):
    paths.staging.parent.mkdir(parents=True, exist_ok=True)
    paths.staging.write_text("".join(f"{r}\n" for r in reviews), encoding="utf-8")


def training_line_count(paths):
    return len(paths.training_data.read_text(encoding="utf-8").splitlines())


class TestAnswerParsing:
    @pytest.mark.parametrize("answer", ["y", "Y", "yes", " y "])
    def test_confirmation_yes(self, answer):
        assert parse_confirmation(answer) is True

    @pytest.mark.parametrize("answer", ["n", "N", "no"])
    def test_confirmation_no(self, answer):
        assert parse_confirmation(answer) is False

    def test_confirmation_invalid(self):
        with pytest.raises(InvalidInputError):
            parse_confirmation("maybe")

    def test_correction_values(self):
        assert parse_correction("1") is True
        assert parse_correction(" 0 ") is False

    @pytest.mark.parametrize("answer", ["2", "-1", "one", ""])
    def test_correction_invalid(self, answer):
        with pytest.raises(InvalidInputError):
            parse_correction(answer)


class TestStagedReviewFlow:
    def test_states_when_prediction_is_confirmed(self, console):
        flow = StagedReviewFlow(
            "works fine", FixedModel(True), ScriptedPrompter(["y"]), console
        )

        assert flow.state is ReviewState.PREDICTING
        assert flow.step() is ReviewState.AWAITING_CONFIRMATION
        assert flow.step() is ReviewState.DONE
        assert flow.outcome is ReviewOutcome.ACCEPTED
        assert flow.label is True
        assert "is: Positive" in console_text(console)

    def test_states_when_prediction_is_corrected(self, console):
        prompter = ScriptedPrompter(["n", "0"])
        flow = StagedReviewFlow("works fine", FixedModel(True), prompter, console)

        flow.step()
        assert flow.step() is ReviewState.AWAITING_CORRECTION
        assert flow.step() is ReviewState.DONE
        assert flow.outcome is ReviewOutcome.CORRECTED
        assert flow.label is False
        assert prompter.prompts == [CONFIRM_PROMPT, CORRECTION_PROMPT]

    def test_invalid_correction_leaves_review_unlabeled(self, console):
        flow = StagedReviewFlow(
            "works fine", FixedModel(False), ScriptedPrompter(["n", "2"]), console
        )

        assert flow.run() is ReviewOutcome.INVALID
        assert flow.label is None
        assert "Invalid input. The classification has not been updated." in (
            console_text(console)
        )

    def test_unrecognized_confirmation_counts_as_no(self, console):
        flow = StagedReviewFlow(
            "works fine", FixedModel(False), ScriptedPrompter(["maybe", "1"]), console
        )

        assert flow.run() is ReviewOutcome.CORRECTED
        assert flow.label is True
        assert "treating it as 'no'" in console_text(console)

    def test_run_rejects_finished_flow_without_outcome(self, console):
        flow = StagedReviewFlow(
            "works fine", FixedModel(True), ScriptedPrompter([]), console
        )
        flow.state = ReviewState.DONE

        with pytest.raises(ReviewClassifierError, match="without an outcome"):
            flow.run()


class TestEnterNewReviews:
    def test_without_model_collects_nothing(
        self, paths, training_file, context, console
    ):
        stage(paths, "previous review")
        session, prompter = make_session(paths, context, console, ["never asked"])

        assert session.enter_new_reviews() == []

        assert prompter.prompts == []
        assert "No classification can be performed" in console_text(console)
        assert load_staging_reviews(paths.staging) == ["previous review"]

    def test_collects_and_stages_reviews(self, trained_paths, context, console):
        stage(trained_paths, "stale review")
        session, prompter = make_session(
            trained_paths, context, console, ["love it", "broke right away", "EXIT"]
        )

        reviews = session.enter_new_reviews()

        assert [r.text for r in reviews] == ["love it", "broke right away"]
        assert all(r.label is None for r in reviews)
        assert load_staging_reviews(trained_paths.staging) == [
            "love it",
            "broke right away",
        ]
        output = console_text(console)
        assert "The classification for the review 'love it' is:" in output
        assert "All new reviews have been saved." in output
        assert len(prompter.prompts) == 3

    def test_exit_keyword_is_case_insensitive(self, trained_paths, context, console):
        session, _ = make_session(trained_paths, context, console, ["  Exit "])

        assert session.enter_new_reviews() == []
        assert trained_paths.staging.read_text(encoding="utf-8") == ""

    def test_end_of_input_stops_and_saves(self, trained_paths, context, console):
        session, _ = make_session(trained_paths, context, console, ["only review"])

        session.enter_new_reviews()

        assert load_staging_reviews(trained_paths.staging) == ["only review"]

    def test_skips_text_with_tabs(self, trained_paths, context, console):
        session, _ = make_session(
            trained_paths, context, console, ["bad\treview", "good review", "exit"]
        )

        session.enter_new_reviews()

        assert load_staging_reviews(trained_paths.staging) == ["good review"]
        assert "single line without tabs" in console_text(console)

    def test_rejects_blank_reviews(self, trained_paths, context, console):
        session, _ = make_session(
            trained_paths, context, console, ["", "   ", "good review", "exit"]
        )

        reviews = session.enter_new_reviews()

        assert [r.text for r in reviews] == ["good review"]
        assert load_staging_reviews(trained_paths.staging) == ["good review"]
        output = console_text(console)
        assert output.count("Empty reviews are ignored.") == 2
        assert output.count("The classification for the review") == 1


class TestClassifyNewReviews:
    def test_without_model_has_no_side_effects(
        self, paths, training_file, context, console
    ):
        stage(paths, "pending review")
        before = paths.training_data.read_text(encoding="utf-8")
        session, prompter = make_session(paths, context, console, [])

        assert session.classify_new_reviews() is None

        assert prompter.prompts == []
        assert paths.training_data.read_text(encoding="utf-8") == before
        assert load_staging_reviews(paths.staging) == ["pending review"]
        assert not paths.model.exists()
        assert "Please train a model first" in console_text(console)

    def test_accepted_prediction_is_appended(self, trained_paths, context, console):
        expected = load(trained_paths.model).predict("solid and reliable")
        stage(trained_paths, "solid and reliable")
        session, _ = make_session(trained_paths, context, console, ["y"])

        summary = session.classify_new_reviews()

        assert summary.accepted == 1
        records = load_training_dataset(trained_paths.training_data)
        assert records[-1].text == "solid and reliable"
        assert records[-1].label is expected
        assert trained_paths.staging.stat().st_size == 0

    def test_corrected_label_is_appended(self, trained_paths, context, console):
        stage(trained_paths, "not what I ordered")
        session, _ = make_session(trained_paths, context, console, ["n", "0"])

        summary = session.classify_new_reviews()

        assert summary.corrected == 1
        last_line = trained_paths.training_data.read_text(encoding="utf-8")
        assert last_line.splitlines()[-1] == "not what I ordered\t0"

    def test_invalid_correction_drops_review(self, trained_paths, context, console):
        stage(trained_paths, "hard to say")
        lines_before = training_line_count(trained_paths)
        session, _ = make_session(trained_paths, context, console, ["n", "2"])

        summary = session.classify_new_reviews()

        assert summary.invalid == 1
        assert summary.appended == 0
        assert training_line_count(trained_paths) == lines_before
        assert trained_paths.staging.stat().st_size == 0
        assert "Invalid input. The classification has not been updated." in (
            console_text(console)
        )

    def test_existing_review_is_skipped(self, trained_paths, context, console):
        stage(trained_paths, "worst purchase ever")
        lines_before = training_line_count(trained_paths)
        session, prompter = make_session(trained_paths, context, console, [])

        summary = session.classify_new_reviews()

        assert summary.skipped == 1
        assert prompter.prompts == []
        assert training_line_count(trained_paths) == lines_before
        assert trained_paths.staging.stat().st_size == 0
        assert "already exists in the training data and will be ignored" in (
            console_text(console)
        )

    def test_existing_review_after_byte_order_mark_is_skipped(
        self, trained_paths, context, console
    ):
        trained_paths.staging.write_text(
            "\ufeffworst purchase ever\n", encoding="utf-8"
        )
        lines_before = training_line_count(trained_paths)
        session, prompter = make_session(trained_paths, context, console, ["y"])

        summary = session.classify_new_reviews()

        assert summary.skipped == 1
        assert summary.appended == 0
        assert prompter.prompts == []
        assert training_line_count(trained_paths) == lines_before
        assert "\ufeff" not in trained_paths.training_data.read_text(encoding="utf-8")

    def test_invalid_utf8_staging_file_leaves_data_untouched(
        self, trained_paths, context, console
    ):
        trained_paths.staging.write_bytes(b"caf\xe9 ok\n")
        before = trained_paths.training_data.read_text(encoding="utf-8")
        session, _ = make_session(trained_paths, context, console, [])

        with pytest.raises(MalformedRecordError, match="not valid UTF-8"):
            session.classify_new_reviews()

        assert trained_paths.training_data.read_text(encoding="utf-8") == before
        assert trained_paths.staging.read_bytes() == b"caf\xe9 ok\n"

    def test_line_count_grows_by_appended_reviews(
        self, trained_paths, context, console
    ):
        stage(
            trained_paths,
            "first new review",
            "worst purchase ever",
            "second new review",
            "third new review",
        )
        lines_before = training_line_count(trained_paths)
        session, _ = make_session(
            trained_paths, context, console, ["y", "n", "1", "n", "x"]
        )

        summary = session.classify_new_reviews()

        assert (summary.accepted, summary.corrected) == (1, 1)
        assert (summary.skipped, summary.invalid) == (1, 1)
        assert training_line_count(trained_paths) == lines_before + 2
        assert trained_paths.staging.stat().st_size == 0

    def test_repeated_staged_review_is_added_once(
        self, trained_paths, context, console
    ):
        stage(trained_paths, "same text twice", "same text twice")
        lines_before = training_line_count(trained_paths)
        session, _ = make_session(trained_paths, context, console, ["n", "1"])

        summary = session.classify_new_reviews()

        assert summary.corrected == 1
        assert summary.skipped == 1
        assert training_line_count(trained_paths) == lines_before + 1

    def test_write_failure_does_not_abort_batch(
        self, trained_paths, context, console, monkeypatch
    ):
        real_append = session_module.append_training_record

        def flaky_append(path, text, label, columns):
            if text == "cannot be written":
                raise OSError("disk full")
            real_append(path, text, label, columns)

        monkeypatch.setattr(session_module, "append_training_record", flaky_append)
        stage(trained_paths, "cannot be written", "can be written")
        session, _ = make_session(
            trained_paths, context, console, ["n", "1", "n", "0"]
        )

        summary = session.classify_new_reviews()

        assert summary.failed == 1
        assert summary.corrected == 1
        assert "Error updating training data: disk full" in console_text(console)
        texts = [r.text for r in load_training_dataset(trained_paths.training_data)]
        assert "can be written" in texts
        assert "cannot be written" not in texts
        assert trained_paths.staging.stat().st_size == 0

    def test_retrains_even_without_new_reviews(
        self, trained_paths, context, console, monkeypatch
    ):
        calls = []
        real_build = session_module.build_and_train

        def spy(*args, **kwargs):
            calls.append(args)
            return real_build(*args, **kwargs)

        monkeypatch.setattr(session_module, "build_and_train", spy)
        session, _ = make_session(trained_paths, context, console, [])

        summary = session.classify_new_reviews()

        assert summary.appended == 0
        assert len(calls) == 1
        assert session.model is not None
        assert "Classification Summary" in console_text(console)

    def test_retrained_model_includes_new_reviews(
        self, trained_paths, context, console
    ):
        stage(trained_paths, "an extra labeled review")
        session, _ = make_session(trained_paths, context, console, ["n", "1"])

        session.classify_new_reviews()

        assert load(trained_paths.model).metadata["training_samples"] == 9
