from bank import get_catalog
from selector import select


def todays(clock):
    return select(get_catalog(), clock.today())


def wrong_index(q):
    return (q.correct_index + 1) % len(q.options)


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_public_question_hides_answer(client, clock):
    r = client.get("/api/question")
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"id", "question", "options", "category", "questionNumber"}
    assert body["id"] == todays(clock).id
    assert len(body["options"]) == 4


def test_question_number_increases_day_to_day(client, clock):
    n1 = client.get("/api/question").json()["questionNumber"]
    clock.advance()
    n2 = client.get("/api/question").json()["questionNumber"]
    assert n2 == n1 + 1


def test_user_created_on_first_lookup(client, clock):
    r = client.get("/api/user/1001")
    assert r.status_code == 200
    b = r.json()
    assert b["user"]["fid"] == 1001
    assert b["user"]["currentStreak"] == 0
    assert b["user"]["lastPlayed"] is None
    assert b["hasPlayedToday"] is False
    assert b["todaysAnswer"] is None
    assert b["question"]["correct"] == todays(clock).correct_index
    assert "funFact" in b["question"]
    assert isinstance(b["questionNumber"], int)
    assert "version" not in b["user"]


def test_user_lookup_carries_full_question(client, clock):
    q = todays(clock)
    b = client.get("/api/user/1002").json()
    assert b["question"] == {
        "id": q.id,
        "question": q.text,
        "options": list(q.options),
        "correct": q.correct_index,
        "category": q.category,
        "funFact": q.fun_fact,
    }


def test_user_invalid_fid(client):
    r = client.get("/api/user/abc")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid FID"}


def test_user_username_refresh(client):
    r = client.get("/api/user/1002", params={"username": "dana"})
    assert r.json()["user"]["username"] == "dana"


def test_answer_correct_then_already_played(client, clock):
    q = todays(clock)
    r = client.post("/api/answer", json={"fid": 2001, "username": "eve", "answerIndex": q.correct_index})
    assert r.status_code == 200
    b = r.json()
    assert b["success"] is True and b["isCorrect"] is True
    assert b["correctAnswer"] == q.correct_index
    assert b["funFact"] == q.fun_fact
    assert b["user"]["currentStreak"] == 1
    assert b["user"]["username"] == "eve"
    assert b["user"]["answers"][clock.today().isoformat()] == {
        "correct": True,
        "date": clock.today().isoformat(),
    }

    r2 = client.post("/api/answer", json={"fid": 2001, "answerIndex": wrong_index(q)})
    assert r2.status_code == 400
    b2 = r2.json()
    assert b2["error"] == "Already played today"
    assert b2["todaysAnswer"]["correct"] is True
    assert b2["user"] == b["user"]

    status = client.get("/api/user/2001").json()
    assert status["hasPlayedToday"] is True
    assert status["todaysAnswer"]["correct"] is True


def test_answer_streak_across_days(client, clock):
    for _ in range(2):
        q = todays(clock)
        client.post("/api/answer", json={"fid": 2002, "answerIndex": q.correct_index})
        clock.advance()
    u = client.get("/api/user/2002").json()["user"]
    assert u["currentStreak"] == 2 and u["longestStreak"] == 2

    # skip a day, then answer right: streak restarts
    clock.advance()
    q = todays(clock)
    b = client.post("/api/answer", json={"fid": 2002, "answerIndex": q.correct_index}).json()
    assert b["user"]["currentStreak"] == 1
    assert b["user"]["longestStreak"] == 2


def test_answer_wrong(client, clock):
    q = todays(clock)
    b = client.post("/api/answer", json={"fid": 2003, "answerIndex": wrong_index(q)}).json()
    assert b["isCorrect"] is False
    assert b["correctAnswer"] == q.correct_index
    assert b["user"]["currentStreak"] == 0
    assert b["user"]["totalPlayed"] == 1 and b["user"]["totalCorrect"] == 0


def test_answer_missing_fields(client):
    for body in ({"answerIndex": 1}, {"fid": 5}, {"fid": 0, "answerIndex": 1}, {}):
        r = client.post("/api/answer", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Missing fid or answerIndex"}


def test_answer_index_out_of_range_changes_nothing(client):
    r = client.post("/api/answer", json={"fid": 2004, "answerIndex": 7})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid answerIndex"
    u = client.get("/api/user/2004").json()
    assert u["hasPlayedToday"] is False
    assert u["user"]["totalPlayed"] == 0


def test_answer_wrong_types_are_client_errors(client):
    r = client.post("/api/answer", json={"fid": "abc", "answerIndex": 1})
    assert r.status_code == 400
    assert "error" in r.json()


def test_leaderboard(client, clock):
    q = todays(clock)
    client.post("/api/answer", json={"fid": 3001, "username": "a", "answerIndex": q.correct_index})
    client.post("/api/answer", json={"fid": 3002, "username": "b", "answerIndex": wrong_index(q)})
    r = client.get("/api/leaderboard")
    assert r.status_code == 200
    board = r.json()["leaderboard"]
    assert board[0] == {"fid": 3001, "username": "a", "streak": 1, "total": 1}
    assert {e["fid"] for e in board} == {3001, 3002}


def test_leaderboard_empty(client):
    r = client.get("/api/leaderboard")
    assert r.status_code == 200
    assert r.json() == {"leaderboard": []}
