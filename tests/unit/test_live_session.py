"""Unit tests for LiveTranscriptionSession."""

import pytest

from livescribe.models.session import SessionState
from livescribe.models.transcription import AlternativeCandidate
from livescribe.recognition.errors import UnsupportedEnvironmentError
from livescribe.services.live_session import LiveTranscriptionSession

from conftest import final, interim


@pytest.mark.unit
class TestLifecycle:
    """State transitions and the engine commands they issue."""

    def test_initial_state(self, session, engine):
        assert session.state is SessionState.IDLE
        assert session.is_supported() is True
        assert engine.commands == []

    def test_start_begins_listening(self, session, engine):
        session.start()
        assert session.state is SessionState.RECORDING
        assert engine.commands == ["start"]
        assert engine.listener is session

    def test_engine_created_lazily_once(self, engine, fast_policy, loop):
        created = []

        def factory():
            created.append(engine)
            return engine

        session = LiveTranscriptionSession(factory, restart_policy=fast_policy, loop=loop)
        assert created == []

        session.start()
        session.stop()
        session.start()
        assert len(created) == 1

    def test_start_while_recording_is_ignored(self, session, engine):
        session.start()
        session.start()
        assert engine.commands == ["start"]

    def test_start_clears_previous_transcript(self, session, engine):
        session.start()
        engine.emit_results(final("old words"))
        session.stop()
        engine.emit_end()

        session.start()
        assert session.get_transcript().final == ""

    def test_start_when_engine_already_active_succeeds(self, session, engine):
        engine.listening = True
        session.start()
        assert session.state is SessionState.RECORDING
        assert engine.commands == ["start"]

    def test_start_failure_propagates(self, session, engine):
        engine.start_failure = RuntimeError("device busy")

        with pytest.raises(RuntimeError, match="device busy"):
            session.start()
        assert session.state is SessionState.IDLE
        assert session.scheduler.pending is False

    def test_resume_failure_propagates(self, session, engine):
        session.start()
        session.pause()
        engine.start_failure = RuntimeError("device busy")

        with pytest.raises(RuntimeError):
            session.resume()
        assert session.state is SessionState.PAUSED

    def test_unsupported_environment(self, fast_policy, loop):
        session = LiveTranscriptionSession(None, restart_policy=fast_policy, loop=loop)
        assert session.is_supported() is False

        with pytest.raises(UnsupportedEnvironmentError):
            session.start()
        assert session.state is SessionState.IDLE

    def test_pause_and_resume(self, session, engine):
        session.start()
        session.pause()
        assert session.state is SessionState.PAUSED

        session.resume()
        assert session.state is SessionState.RECORDING
        assert engine.commands == ["start", "stop", "start"]

    def test_pause_twice_issues_one_command(self, session, engine):
        session.start()
        session.pause()
        session.pause()
        assert engine.commands == ["start", "stop"]
        assert session.state is SessionState.PAUSED

    def test_pause_and_resume_are_noops_when_idle(self, session, engine):
        session.pause()
        session.resume()
        assert session.state is SessionState.IDLE
        assert engine.commands == []

    def test_resume_while_recording_is_noop(self, session, engine):
        session.start()
        session.resume()
        assert engine.commands == ["start"]

    def test_stop_from_paused(self, session, engine):
        session.start()
        engine.emit_results(final("before pause"))
        session.pause()

        assert session.stop() == "before pause "
        assert session.state is SessionState.STOPPED
        assert engine.commands == ["start", "stop", "stop"]

    def test_stop_from_idle_returns_empty(self, session, engine):
        assert session.stop() == ""
        assert session.state is SessionState.IDLE
        assert engine.commands == []

    def test_stop_twice_issues_one_command(self, session, engine):
        session.start()
        engine.emit_results(final("done"))
        assert session.stop() == "done "
        assert session.stop() == ""
        assert engine.commands == ["start", "stop"]
        assert session.state is SessionState.STOPPED

    def test_clear_keeps_state(self, session, engine):
        session.start()
        engine.emit_results(final("hello"), interim("wor"))
        session.clear()

        snapshot = session.get_transcript()
        assert snapshot.final == "" and snapshot.interim == ""
        assert session.state is SessionState.RECORDING


@pytest.mark.unit
class TestLanguage:
    """Language changes apply on the next engine start."""

    def test_language_used_on_start(self, session, engine):
        session.set_language("ur-PK")
        session.start()
        assert engine.start_languages == ["ur-PK"]

    def test_change_while_recording_applies_to_next_pass(self, session, engine, run_for):
        session.start()
        session.set_language("en-IN")
        assert engine.start_languages == ["en-US"]

        engine.emit_end()
        run_for(0.05)

        assert engine.start_languages == ["en-US", "en-IN"]
        assert session.language == "en-IN"


@pytest.mark.unit
class TestResults:
    """Result routing into the transcript."""

    def test_final_result_without_alternatives(self, session, engine, updates):
        session.start()
        engine.emit_results(final("hello world", 0.9))

        assert len(updates) == 1
        assert updates[0].final == "hello world "
        assert updates[0].interim == ""
        assert updates[0].combined == "hello world "

    def test_best_alternative_is_finalized(self, session, engine, updates):
        session.start()
        engine.emit_results(final("helo", 0.4, alternatives=[("helo", 0.4), ("hello", 0.85)]))

        assert updates[0].final == "hello "
        assert updates[0].new_segments[0].text == "hello"
        assert updates[0].new_segments[0].confidence == 0.85
        assert updates[0].alternatives == [
            AlternativeCandidate("helo", 0.4),
            AlternativeCandidate("hello", 0.85),
        ]

    def test_only_first_alternatives_are_considered(self, engine, fast_policy, loop):
        session = LiveTranscriptionSession(
            lambda: engine, restart_policy=fast_policy, max_alternatives=2, loop=loop)
        session.start()
        engine.emit_results(final("a", alternatives=[("a", 0.5), ("b", 0.6), ("c", 0.99)]))
        assert session.get_transcript().final == "b "

    def test_single_alternative_not_reported(self, session, engine, updates):
        session.start()
        engine.emit_results(final("solo", alternatives=[("solo", 0.8)]))
        assert updates[0].alternatives == []

    def test_interim_replaced_then_cleared_on_final(self, session, engine, updates):
        session.start()
        engine.emit_results(interim("hel"))
        engine.emit_results(interim("hello th"))
        assert updates[-1].interim == "hello th"
        assert updates[-1].final == ""
        assert updates[-1].combined == "hello th"

        engine.emit_results(final("hello there"))
        assert updates[-1].interim == ""
        assert updates[-1].final == "hello there "

    def test_batch_emits_one_update(self, session, engine, updates):
        session.start()
        engine.emit_results(final("first"), final("second"), interim("thi"))

        assert len(updates) == 1
        assert updates[0].final == "first second "
        assert updates[0].interim == "thi"
        assert updates[0].combined == "first second thi"
        assert [s.text for s in updates[0].new_segments] == ["first", "second"]

    def test_interim_results_of_one_batch_are_joined(self, session, engine, updates):
        session.start()
        engine.emit_results(interim("to be"), interim(" or not"))
        assert updates[-1].interim == "to be or not"

        engine.emit_results(interim("to be or not to"))
        assert updates[-1].interim == "to be or not to"

    def test_transcript_is_joined_in_emission_order(self, session, engine, run_for):
        session.start()
        texts = ["the lecture", "starts with", "a recap"]
        for text in texts:
            engine.emit_results(final(text))
            engine.emit_end()
            run_for(0.03)

        assert session.get_transcript().final == "".join(f"{t} " for t in texts)

    def test_segment_appended_before_notification(self, session, engine):
        seen = []
        session.set_on_transcript_update(lambda update: seen.append(session.get_transcript().final))
        session.start()
        engine.emit_results(final("ordered"))
        assert seen == ["ordered "]

    def test_results_after_stop_are_dropped(self, session, engine, updates):
        session.start()
        engine.emit_results(final("kept"))
        session.stop()
        engine.emit_results(final("late"))

        assert session.get_transcript().final == "kept "
        assert len(updates) == 1

    def test_failing_callback_does_not_break_session(self, session, engine):
        def broken(update):
            raise RuntimeError("ui exploded")

        session.set_on_transcript_update(broken)
        session.start()
        engine.emit_results(final("still here"))
        assert session.get_transcript().final == "still here "


@pytest.mark.unit
class TestRestarts:
    """Automatic restarts after engine end and error events."""

    def test_end_while_recording_restarts(self, session, engine, run_for):
        session.start()
        engine.emit_end()
        assert session.scheduler.pending is True
        assert engine.start_count == 1

        run_for(0.05)

        assert engine.commands == ["start", "start"]
        assert session.state is SessionState.RECORDING

    @pytest.mark.parametrize("kind", ["no-speech", "network", "aborted"])
    def test_recoverable_error_restarts(self, session, engine, errors, run_for, kind):
        session.start()
        engine.emit_error(kind)
        engine.listening = False

        assert errors == [kind]
        assert session.scheduler.pending is True

        run_for(0.1)
        assert engine.start_count == 2

    def test_network_error_waits_longer(self, session, engine, run_for):
        session.start()
        engine.emit_error("network")
        engine.listening = False

        run_for(0.02)
        assert engine.start_count == 1

        run_for(0.06)
        assert engine.start_count == 2

    @pytest.mark.parametrize("kind", ["audio-capture", "not-allowed"])
    def test_fatal_error_does_not_restart(self, session, engine, errors, run_for, kind):
        session.start()
        engine.emit_error(kind)

        assert errors == [kind]
        assert session.scheduler.pending is False
        assert session.state is SessionState.RECORDING

        run_for(0.05)
        assert engine.start_count == 1

    def test_error_then_end_restarts_once(self, session, engine, run_for):
        session.start()
        engine.emit_error("no-speech")
        engine.emit_end()

        run_for(0.1)

        assert engine.start_count == 2

    def test_restart_when_engine_already_active_is_swallowed(self, session, engine, errors, run_for):
        session.start()
        engine.emit_error("no-speech")
        # The engine keeps listening despite the error
        run_for(0.05)

        assert engine.start_count == 2
        assert session.state is SessionState.RECORDING
        assert errors == ["no-speech"]

    def test_failed_restart_is_reported_and_retried(self, session, engine, errors, loop_errors, run_for):
        session.start()
        engine.start_failure = RuntimeError("device busy")
        engine.emit_end()

        run_for(0.015)
        assert errors == ["other"]
        assert session.scheduler.pending is True
        assert session.state is SessionState.RECORDING

        run_for(0.05)
        assert engine.start_count == 3
        assert engine.listening is True
        assert loop_errors == []

    def test_pause_cancels_pending_restart(self, session, engine, run_for):
        session.start()
        engine.emit_error("network")
        session.pause()

        assert session.scheduler.pending is False
        run_for(0.1)
        assert engine.start_count == 1

    def test_end_after_pause_does_not_restart(self, session, engine, run_for):
        session.start()
        session.pause()
        engine.emit_end()

        run_for(0.05)

        assert engine.commands == ["start", "stop"]
        assert session.state is SessionState.PAUSED

    def test_events_after_stop_do_not_restart(self, session, engine, errors, run_for):
        session.start()
        session.stop()
        engine.emit_error("no-speech")
        engine.emit_end()

        run_for(0.05)

        assert engine.commands == ["start", "stop"]
        assert errors == ["no-speech"]

    def test_stop_cancels_pending_restart(self, session, engine, run_for):
        session.start()
        engine.emit_end()
        session.stop()

        assert session.scheduler.pending is False
        run_for(0.05)
        assert engine.start_count == 1

    def test_restart_keeps_finalized_text(self, session, engine, run_for):
        session.start()
        engine.emit_results(final("before restart"))
        engine.emit_end()
        run_for(0.05)
        engine.emit_results(final("after restart"))

        assert session.get_transcript().final == "before restart after restart "


@pytest.mark.unit
class TestEndNotification:
    """End-of-session delivery."""

    def test_stop_value_matches_end_notification(self, session, engine, ends):
        session.start()
        engine.emit_results(final("hello world"))

        transcript = session.stop()
        assert ends == []

        engine.emit_end()
        assert ends == [transcript] == ["hello world "]

    def test_end_delivered_exactly_once(self, session, engine, ends):
        session.start()
        session.stop()
        engine.emit_end()
        engine.emit_end()
        assert ends == [""]

    def test_no_end_notification_while_recording_or_paused(self, session, engine, ends, run_for):
        session.start()
        engine.emit_end()
        run_for(0.05)
        session.pause()
        engine.emit_end()
        assert ends == []

    def test_stop_after_engine_ended_during_pause(self, session, engine, ends):
        session.start()
        engine.emit_results(final("before pause"))
        session.pause()
        engine.emit_end()

        assert session.stop() == "before pause "
        assert ends == ["before pause "]

    def test_stop_while_restart_pending_delivers_end(self, session, engine, ends):
        session.start()
        engine.emit_end()
        session.stop()
        assert ends == [""]

    def test_end_delivered_again_for_next_recording(self, session, engine, ends):
        session.start()
        engine.emit_results(final("first"))
        session.stop()
        engine.emit_end()

        session.start()
        engine.emit_results(final("second"))
        session.stop()
        engine.emit_end()

        assert ends == ["first ", "second "]
