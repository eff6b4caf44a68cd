import json

import pytest

from observability import configure_logging, log_event, span


@pytest.fixture()
def event_log(tmp_path):
    path = tmp_path / "events.log"
    configure_logging(log_file=str(path), enable_files=True)
    yield path
    configure_logging(enable_files=False)


def _json_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_event_written_as_json_and_human_line(event_log):
    log_event("session_created", "s1", owner_id="u1", status="created", requested=5)

    (event,) = _json_lines(event_log)
    assert event["kind"] == "session_created"
    assert event["session_id"] == "s1"
    assert event["requested"] == 5

    human = (event_log.parent / "events-human.log").read_text(encoding="utf-8")
    assert "session=s1 kind=session_created owner_id=u1 status=created" in human


def test_span_records_timing_and_failure(event_log):
    with pytest.raises(RuntimeError):
        with span("question_generation", "s2"):
            raise RuntimeError("provider down")
    with span("interview_evaluation") as timing:
        pass

    events = _json_lines(event_log)
    assert [(e["span"], e["outcome"]) for e in events] == [("question_generation", "error"), ("interview_evaluation", "ok")]
    assert events[1]["session_id"] == "-"
    assert events[1]["ms"] == timing.ms >= 0
