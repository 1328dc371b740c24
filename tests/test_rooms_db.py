"""Tests for room and answer stores with mocked Supabase."""

from unittest.mock import MagicMock, patch

import pytest

from gap_engine.core.errors import ConfigurationError, PersistenceError
from gap_engine.core.schemas_analysis import AnalysisResult, Category, CategoryReport, GapGrade
from gap_engine.db.answers import AnswerStore
from gap_engine.db.rooms import RoomStore, result_to_room_update
from gap_engine.db.supabase_client import create_supabase

ROOM_ID = "12345678-1234-1234-1234-123456789abc"


def _response(data):
    response = MagicMock()
    response.data = data
    return response


def test_create_room_inserts_waiting_room():
    mock_supabase = MagicMock()
    mock_supabase.table.return_value.insert.return_value.execute.return_value = _response(
        [{"id": ROOM_ID, "status": "waiting"}]
    )

    with patch("gap_engine.db.rooms.get_supabase", return_value=mock_supabase):
        room = RoomStore().create()

    assert room.id == ROOM_ID
    assert room.status == "waiting"
    mock_supabase.table.assert_called_with("rooms")
    payload = mock_supabase.table.return_value.insert.call_args[0][0]
    assert payload["status"] == "waiting"
    assert payload["summary_report"] is None


def test_create_room_without_data_fails():
    mock_supabase = MagicMock()
    mock_supabase.table.return_value.insert.return_value.execute.return_value = _response([])

    with pytest.raises(PersistenceError):
        RoomStore(client=mock_supabase).create()


def test_get_room():
    mock_supabase = MagicMock()
    query = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
    query.execute.return_value = _response(
        [
            {
                "id": ROOM_ID,
                "status": "completed",
                "summary_report": "サマリー",
                "gap_grade": "good",
                "category_reports": [
                    {
                        "category": "vision",
                        "categoryName": "価値観・ビジョン（方向性の一致）",
                        "status": "excellent",
                        "statusLabel": "非常に良好",
                        "report": "レポート",
                    }
                ],
            }
        ]
    )

    room = RoomStore(client=mock_supabase).get(ROOM_ID)

    assert room.gap_grade == GapGrade.GOOD
    assert room.category_reports[0].category == Category.VISION
    assert not room.category_reports[0].is_fallback
    mock_supabase.table.return_value.select.return_value.eq.assert_called_with("id", ROOM_ID)


def test_get_room_not_found():
    mock_supabase = MagicMock()
    query = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
    query.execute.return_value = _response([])

    assert RoomStore(client=mock_supabase).get(ROOM_ID) is None


def test_get_room_query_failure():
    mock_supabase = MagicMock()
    mock_supabase.table.side_effect = RuntimeError("connection reset")

    with pytest.raises(PersistenceError):
        RoomStore(client=mock_supabase).get(ROOM_ID)


def test_update_room_stamps_updated_at():
    mock_supabase = MagicMock()

    RoomStore(client=mock_supabase).update(ROOM_ID, {"status": "completed"})

    payload = mock_supabase.table.return_value.update.call_args[0][0]
    assert payload["status"] == "completed"
    assert "updated_at" in payload
    mock_supabase.table.return_value.update.return_value.eq.assert_called_with("id", ROOM_ID)


def test_update_room_failure():
    mock_supabase = MagicMock()
    mock_supabase.table.return_value.update.return_value.eq.return_value.execute.side_effect = (
        RuntimeError("timeout")
    )

    with pytest.raises(PersistenceError):
        RoomStore(client=mock_supabase).update(ROOM_ID, {"status": "completed"})


def test_result_to_room_update():
    result = AnalysisResult(
        summary="サマリー",
        grade=GapGrade.CAUTION,
        category_reports=[
            CategoryReport(
                category=Category.TRUST,
                category_name="信頼",
                status=GapGrade.GOOD,
                status_label="良好",
                report="レポート",
                is_fallback=True,
            )
        ],
    )

    update = result_to_room_update(result)

    assert update["status"] == "completed"
    assert update["gap_grade"] == "caution"
    assert update["summary_report"] == "サマリー"
    assert update["category_reports"] == [
        {
            "category": "trust",
            "categoryName": "信頼",
            "status": "good",
            "statusLabel": "良好",
            "report": "レポート",
            "isFallback": True,
        }
    ]


def test_insert_answers_payload():
    mock_supabase = MagicMock()

    with patch("gap_engine.db.answers.get_supabase", return_value=mock_supabase):
        AnswerStore().insert(ROOM_ID, "host", {"q1": 5})

    mock_supabase.table.assert_called_with("answers")
    payload = mock_supabase.table.return_value.insert.call_args[0][0]
    assert payload == {"room_id": ROOM_ID, "user_type": "host", "answers": {"q1": 5}}


def test_insert_answers_failure():
    mock_supabase = MagicMock()
    mock_supabase.table.return_value.insert.return_value.execute.side_effect = RuntimeError("boom")

    with pytest.raises(PersistenceError):
        AnswerStore(client=mock_supabase).insert(ROOM_ID, "guest", {"q1": 5})


def test_list_answers_by_room():
    mock_supabase = MagicMock()
    mock_supabase.table.return_value.select.return_value.eq.return_value.execute.return_value = (
        _response(
            [
                {"id": "a1", "room_id": ROOM_ID, "user_type": "host", "answers": {"q1": 5}},
                {"id": "a2", "room_id": ROOM_ID, "user_type": "guest", "answers": {"q1": 3}},
            ]
        )
    )

    answers = AnswerStore(client=mock_supabase).list_by_room(ROOM_ID)

    assert [a.user_type for a in answers] == ["host", "guest"]
    assert answers[1].answers == {"q1": 3}


@pytest.mark.parametrize("rows, expected", [([{"id": "a1"}], True), ([], False)])
def test_has_answered(rows, expected):
    mock_supabase = MagicMock()
    query = mock_supabase.table.return_value.select.return_value.eq.return_value.eq.return_value
    query.limit.return_value.execute.return_value = _response(rows)

    assert AnswerStore(client=mock_supabase).has_answered(ROOM_ID, "guest") is expected


def test_supabase_settings_required():
    settings = MagicMock(SUPABASE_URL="", SUPABASE_KEY="key")

    with pytest.raises(ConfigurationError) as exc_info:
        create_supabase(settings)

    assert "SUPABASE_URL" in str(exc_info.value)
