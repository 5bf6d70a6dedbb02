#!/usr/bin/env python3
"""
Pytest tests for QuizSessionManager
Covers the start guard, answer recording, status, completion claim and expiry
"""

import random
from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from app.core.exceptions import (
    InvalidQuestionNumber,
    QuizNotFinished,
    SessionNotFound,
    TournamentNotOpen,
)
from app.core.stores import ShardedStore
from app.domain.quiz_domain import (
    Question,
    QuestionBatch,
    QuizDomain,
    SessionKey,
    ordered_options,
    shuffled_options,
)
from app.domain.tournament_domain import TournamentInfo, TournamentWindow
from app.schemas.quiz import Difficulty, QuestionType, QuizAnswerRequest
from app.schemas.tournament import TournamentStatus
from app.services.question_cache import TournamentQuestionCache
from app.services.quiz_session import QuizSessionManager

TODAY = date(2025, 6, 15)


class FakeProvider:
    def __init__(self):
        self.call_count = 0

    def fetch_questions(self, category, difficulty, amount):
        self.call_count += 1
        return [
            Question(
                category="Science & Nature",
                type=QuestionType.MULTIPLE,
                difficulty=Difficulty.EASY,
                question=f"Question {i}?",
                correct_answer=f"Answer {i}",
                incorrect_answers=(f"Zeta {i}", f"Beta {i}", f"Alpha {i}"),
            )
            for i in range(1, amount + 1)
        ]


def make_tournament(tournament_id=1, start=None, end=None, min_passing_score=60.0):
    start = start or TODAY - timedelta(days=1)
    end = end or TODAY + timedelta(days=1)
    return TournamentInfo(
        id=tournament_id,
        name="Science Quiz",
        category="science",
        difficulty="easy",
        min_passing_score=min_passing_score,
        window=TournamentWindow.classify(start, end, TODAY),
    )


class TestTournamentWindow:
    def test_classification(self):
        start, end = date(2025, 6, 10), date(2025, 6, 20)

        assert TournamentWindow.classify(start, end, date(2025, 6, 9)).status == TournamentStatus.UPCOMING
        assert TournamentWindow.classify(start, end, start).status == TournamentStatus.ONGOING
        assert TournamentWindow.classify(start, end, end).status == TournamentStatus.ONGOING
        assert TournamentWindow.classify(start, end, date(2025, 6, 21)).status == TournamentStatus.PAST


class TestAnswerPresentation:
    def setup_method(self):
        self.question = Question(
            category="General Knowledge",
            type=QuestionType.MULTIPLE,
            difficulty=Difficulty.MEDIUM,
            question="What is the capital of Australia?",
            correct_answer="Canberra",
            incorrect_answers=("Sydney", "Melbourne", "Perth"),
        )

    def test_ordered_options_are_alphabetical_and_stable(self):
        expected = ["Canberra", "Melbourne", "Perth", "Sydney"]

        assert ordered_options(self.question) == expected
        assert ordered_options(self.question) == expected

    def test_shuffled_options_contain_every_answer(self):
        options = shuffled_options(self.question, random.Random(3))

        assert sorted(options) == ordered_options(self.question)

    def test_shuffled_options_change_order(self):
        source_order = self.question.all_answers()

        assert shuffled_options(self.question, random.Random(11)) == shuffled_options(
            self.question, random.Random(11)
        )
        assert any(
            shuffled_options(self.question, random.Random(seed)) != source_order
            for seed in range(20)
        )
        assert self.question.all_answers() == source_order

    def test_with_difficulty_keeps_other_fields(self):
        hard = self.question.with_difficulty(Difficulty.HARD)

        assert hard.difficulty == Difficulty.HARD
        assert hard.question == self.question.question
        assert hard.correct_answer == "Canberra"
        assert hard.incorrect_answers == ("Sydney", "Melbourne", "Perth")
        assert self.question.difficulty == Difficulty.MEDIUM

    def test_answer_request_keeps_surrounding_whitespace(self):
        assert QuizAnswerRequest(answer=" Canberra ").answer == " Canberra "
        with pytest.raises(ValidationError):
            QuizAnswerRequest(answer="   ")

    def test_question_response_never_exposes_correct_answer_field(self):
        response = QuizDomain.to_question_response(
            self.question, 1, 10, ordered_options(self.question)
        )

        assert "correct_answer" not in response.model_dump()

    def test_true_false_question_has_two_options(self):
        question = Question(
            category="General Knowledge",
            type=QuestionType.BOOLEAN,
            difficulty=Difficulty.EASY,
            question="There are 7 continents on Earth.",
            correct_answer="True",
            incorrect_answers=("False",),
        )

        assert ordered_options(question) == ["False", "True"]


class TestQuizSessionManager:
    def setup_method(self):
        self.provider = FakeProvider()
        self.session_store = ShardedStore()
        self.cache = TournamentQuestionCache(
            self.provider, session_store=self.session_store
        )
        self.manager = QuizSessionManager(
            self.cache,
            session_store=self.session_store,
            questions_per_tournament=10,
            session_ttl_minutes=60,
        )
        self.tournament = make_tournament()

    def test_start_binds_cached_batch(self):
        session = self.manager.start(7, self.tournament)

        assert session.key == SessionKey(7, 1)
        assert session.total_questions == 10
        assert self.session_store.get(SessionKey(7, 1)) is session

    def test_participants_share_the_same_batch(self):
        first = self.manager.start(7, self.tournament)
        second = self.manager.start(8, self.tournament)

        assert first.batch is second.batch
        assert self.provider.call_count == 1

    def test_upcoming_tournament_rejected(self):
        tournament = make_tournament(
            start=TODAY + timedelta(days=2), end=TODAY + timedelta(days=5)
        )

        with pytest.raises(TournamentNotOpen) as exc_info:
            self.manager.start(7, tournament)

        detail = exc_info.value.to_detail()
        assert detail["reason"] == "TOURNAMENT_NOT_STARTED"
        assert detail["start_date"] == (TODAY + timedelta(days=2)).isoformat()
        assert self.provider.call_count == 0

    def test_past_tournament_rejected(self):
        tournament = make_tournament(
            start=TODAY - timedelta(days=5), end=TODAY - timedelta(days=1)
        )

        with pytest.raises(TournamentNotOpen) as exc_info:
            self.manager.start(7, tournament)

        assert exc_info.value.reason == "TOURNAMENT_ENDED"
        assert exc_info.value.to_detail()["end_date"] == (TODAY - timedelta(days=1)).isoformat()

    def test_get_question_by_number(self):
        self.manager.start(7, self.tournament)

        question, total = self.manager.get_question(7, 1, 3)

        assert question.question == "Question 3?"
        assert total == 10

    @pytest.mark.parametrize("number", [0, 11, -1])
    def test_invalid_question_number(self, number):
        self.manager.start(7, self.tournament)

        with pytest.raises(InvalidQuestionNumber):
            self.manager.get_question(7, 1, number)
        with pytest.raises(InvalidQuestionNumber):
            self.manager.submit_answer(7, 1, number, "Answer 1")

    def test_operations_without_session(self):
        with pytest.raises(SessionNotFound):
            self.manager.get_question(7, 1, 1)
        with pytest.raises(SessionNotFound):
            self.manager.submit_answer(7, 1, 1, "Answer 1")
        with pytest.raises(SessionNotFound):
            self.manager.claim_completed(7, 1)

    def test_answers_are_case_insensitive(self):
        self.manager.start(7, self.tournament)

        outcome = self.manager.submit_answer(7, 1, 1, "answer 1")

        assert outcome.correct is True
        assert outcome.correct_answer == "Answer 1"
        assert outcome.user_answer == "answer 1"

    def test_resubmission_last_write_wins(self):
        self.manager.start(7, self.tournament)

        wrong = self.manager.submit_answer(7, 1, 1, "Alpha 1")
        assert wrong.correct is False
        assert wrong.correct_count == 0

        right = self.manager.submit_answer(7, 1, 1, "Answer 1")
        assert right.correct is True
        assert right.correct_count == 1
        assert right.total_questions == 10

        assert self.manager.status(7, 1).current_question == 2

    def test_answers_in_any_order(self):
        self.manager.start(7, self.tournament)

        self.manager.submit_answer(7, 1, 5, "Answer 5")
        self.manager.submit_answer(7, 1, 2, "wrong")

        status = self.manager.status(7, 1)
        assert status.active is True
        assert status.current_question == 3
        assert status.correct_answers == 1
        assert status.completed is False

    def test_status_without_session(self):
        status = self.manager.status(7, 1)

        assert status.active is False
        assert status.current_question == 0
        assert status.total_questions == 0
        assert status.completed is False

    def test_claim_before_all_answered(self):
        self.manager.start(7, self.tournament)
        for number in range(1, 10):
            self.manager.submit_answer(7, 1, number, f"Answer {number}")

        with pytest.raises(QuizNotFinished) as exc_info:
            self.manager.claim_completed(7, 1)

        assert exc_info.value.to_detail()["answered"] == 9
        assert self.manager.status(7, 1).active is True

    def test_claim_removes_session(self):
        self.manager.start(7, self.tournament)
        for number in range(1, 11):
            self.manager.submit_answer(7, 1, number, f"Answer {number}")

        assert self.manager.status(7, 1).completed is True
        session = self.manager.claim_completed(7, 1)

        assert session.correct_count == 10
        assert self.manager.status(7, 1).active is False
        with pytest.raises(SessionNotFound):
            self.manager.claim_completed(7, 1)

    def test_restart_replaces_progress(self):
        self.manager.start(7, self.tournament)
        self.manager.submit_answer(7, 1, 1, "Answer 1")

        self.manager.start(7, self.tournament)

        assert self.manager.status(7, 1).correct_answers == 0

    def test_idle_session_expires_on_access(self):
        session = self.manager.start(7, self.tournament)
        session.last_activity = datetime.now() - timedelta(minutes=61)

        with pytest.raises(SessionNotFound):
            self.manager.submit_answer(7, 1, 1, "Answer 1")
        assert SessionKey(7, 1) not in self.session_store

    def test_purge_expired(self):
        stale = self.manager.start(7, self.tournament)
        self.manager.start(8, self.tournament)
        stale.last_activity = datetime.now() - timedelta(hours=2)

        assert self.manager.purge_expired() == 1
        assert SessionKey(7, 1) not in self.session_store
        assert SessionKey(8, 1) in self.session_store

    def test_zero_ttl_never_expires(self):
        manager = QuizSessionManager(
            self.cache, questions_per_tournament=10, session_ttl_minutes=0
        )
        session = manager.start(7, self.tournament)
        session.last_activity = datetime.now() - timedelta(days=30)

        assert manager.purge_expired() == 0
        assert manager.status(7, 1).active is True


class TestQuestionBatch:
    def test_bounds(self):
        batch = QuestionBatch(tournament_id=1, questions=tuple(FakeProvider().fetch_questions("x", "easy", 3)))

        assert batch.contains_number(1)
        assert batch.contains_number(3)
        assert not batch.contains_number(0)
        assert not batch.contains_number(4)
        assert batch.get(2).question == "Question 2?"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
