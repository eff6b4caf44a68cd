from fastapi.testclient import TestClient

from api_server import app
from config.registry import EVALUATION_KEY, QUESTION_KEY, bind_model
from llm_gateway import LlmGatewayError


client = TestClient(app)
HEADERS = {"X-User-Id": "candidate-42"}


def test_full_flow(make_provider, feedback_reply):
    evaluator = make_provider(feedback_reply)
    bind_model(QUESTION_KEY, make_provider('```json\n["What is JSX?", "Explain useEffect.", "What is a key prop?"]\n```'))
    bind_model(EVALUATION_KEY, evaluator)

    assert client.get("/health").json() == {"status": "ok"}

    start_resp = client.post(
        "/api/interview/generate",
        json={"topic": "React", "experienceLevel": "Beginner", "difficulty": "easy", "numberOfQuestions": 3},
        headers=HEADERS,
    )
    assert start_resp.status_code == 201
    session_id = start_resp.json()["sessionId"]

    percentages = []
    for index, seconds in ((0, 40), (1, 55), (2, 25)):
        answer_resp = client.post(
            "/api/interview/submit-answer",
            json={"sessionId": session_id, "questionIndex": index, "answer": f"Answer {index}", "timeSpent": seconds},
            headers=HEADERS,
        )
        assert answer_resp.status_code == 200
        percentages.append(answer_resp.json()["completionPercentage"])
    assert percentages == [33, 67, 100]
    assert answer_resp.json()["isCompleted"] is True

    summary_resp = client.get(f"/api/interview/summary/{session_id}", headers=HEADERS)
    assert summary_resp.status_code == 200
    summary = summary_resp.json()
    assert summary["status"] == "evaluated"
    assert summary["totalTimeSpent"] == 120
    assert summary["feedback"]["overallScore"] == 72
    assert summary["feedback"]["questionFeedback"] == [
        {"questionIndex": 0, "score": 7.0, "feedback": "Accurate and concise."}
    ]
    assert summary["averageScore"] == 7.0
    assert summary["metadata"]["aiModel"] == "fake-model"

    repeat = client.get(f"/api/interview/summary/{session_id}", headers=HEADERS)
    assert repeat.status_code == 200
    assert repeat.json()["feedback"] == summary["feedback"]
    assert evaluator.calls == 1

    late_answer = client.post(
        "/api/interview/submit-answer",
        json={"sessionId": session_id, "questionIndex": 1, "answer": "Second thoughts"},
        headers=HEADERS,
    )
    assert late_answer.status_code == 409


def test_summary_provider_failure_allows_retry(make_provider, feedback_reply):
    evaluator = make_provider(LlmGatewayError("provider timeout"), feedback_reply)
    bind_model(QUESTION_KEY, make_provider('["Only question"]'))
    bind_model(EVALUATION_KEY, evaluator)

    session_id = client.post(
        "/api/interview/generate",
        json={"topic": "SQL", "experienceLevel": "intermediate", "numberOfQuestions": 1},
        headers=HEADERS,
    ).json()["sessionId"]
    client.post(
        "/api/interview/submit-answer",
        json={"sessionId": session_id, "questionIndex": 0, "answer": "JOINs combine rows"},
        headers=HEADERS,
    )

    failed = client.get(f"/api/interview/summary/{session_id}", headers=HEADERS)
    assert failed.status_code == 502
    assert client.get(f"/api/interview/session/{session_id}", headers=HEADERS).json()["status"] == "completed"

    retried = client.get(f"/api/interview/summary/{session_id}", headers=HEADERS)
    assert retried.status_code == 200
    assert retried.json()["status"] == "evaluated"
