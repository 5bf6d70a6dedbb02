#!/usr/bin/env python3
"""
Pytest tests for OpenTriviaProvider
Covers retries with backoff, general-knowledge supplementation and the fallback bank
"""

from unittest.mock import Mock, call, patch

import pytest
import requests

from app.schemas.quiz import Difficulty, QuestionType
from app.services.fallback_questions import FALLBACK_BANKS, get_fallback_questions
from app.services.trivia_provider import CATEGORY_MAPPING, OpenTriviaProvider


def make_item(n, category="Science &amp; Nature", type_="multiple", difficulty="easy"):
    return {
        "category": category,
        "type": type_,
        "difficulty": difficulty,
        "question": f"Question {n}?",
        "correct_answer": f"Right {n}",
        "incorrect_answers": [f"Wrong {n}a", f"Wrong {n}b", f"Wrong {n}c"],
    }


def make_response(response_code=0, results=None):
    response = Mock()
    response.status_code = 200
    response.raise_for_status = Mock()
    response.json.return_value = {
        "response_code": response_code,
        "results": results or [],
    }
    return response


class TestBuildParams:
    """Query building for the provider"""

    def setup_method(self):
        self.provider = OpenTriviaProvider(base_url="https://trivia.test/api.php")

    def test_mapped_category_and_difficulty(self):
        params = self.provider._build_params("Science", "EASY", 10)

        assert params == {"amount": "10", "category": "17", "difficulty": "easy"}

    def test_unmapped_category_has_no_filter(self):
        params = self.provider._build_params("astrology", "hard", 5)

        assert "category" not in params
        assert params["amount"] == "5"

    def test_empty_difficulty_omitted(self):
        params = self.provider._build_params("history", "", 10)

        assert "difficulty" not in params

    def test_category_mapping_has_general(self):
        assert CATEGORY_MAPPING["general"] == "9"


@patch("app.services.trivia_provider.time.sleep")
@patch("app.services.trivia_provider.requests.get")
class TestFetchQuestions:
    """Fetching, retrying and falling back"""

    def setup_method(self):
        self.provider = OpenTriviaProvider(
            base_url="https://trivia.test/api.php", max_retries=3, backoff_seconds=1.0
        )

    def test_success_returns_requested_amount(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(0, [make_item(i) for i in range(12)])

        questions = self.provider.fetch_questions("science", "easy", 10)

        assert len(questions) == 10
        assert questions[0].question == "Question 0?"
        assert questions[0].type == QuestionType.MULTIPLE
        assert questions[0].difficulty == Difficulty.EASY
        assert mock_get.call_count == 1
        mock_sleep.assert_not_called()

    def test_html_entities_are_decoded(self, mock_get, mock_sleep):
        item = make_item(1)
        item["question"] = "What does &quot;H&#039;O&quot; stand for?"
        item["correct_answer"] = "Tom &amp; Jerry"
        mock_get.return_value = make_response(0, [item])

        questions = self.provider.fetch_questions("general", "easy", 1)

        assert questions[0].question == "What does \"H'O\" stand for?"
        assert questions[0].correct_answer == "Tom & Jerry"
        assert questions[0].category == "Science & Nature"

    def test_all_attempts_fail_uses_fallback(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        questions = self.provider.fetch_questions("science", "easy", 10)

        assert len(questions) > 0
        assert mock_get.call_count == 3
        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]
        assert questions[0].question == FALLBACK_BANKS["science"][0].question

    def test_fallback_questions_take_requested_difficulty(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.Timeout("slow")

        questions = self.provider.fetch_questions("history", "hard", 10)

        assert len(questions) == len(FALLBACK_BANKS["history"])
        assert all(q.difficulty == Difficulty.HARD for q in questions)

    def test_server_error_then_success(self, mock_get, mock_sleep):
        failing = Mock()
        failing.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        mock_get.side_effect = [failing, make_response(0, [make_item(i) for i in range(10)])]

        questions = self.provider.fetch_questions("science", "easy", 10)

        assert len(questions) == 10
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once_with(1.0)

    def test_no_results_retries_with_general_category(self, mock_get, mock_sleep):
        general = [make_item(i, category="General Knowledge") for i in range(10)]
        mock_get.side_effect = [make_response(1), make_response(0, general)]

        questions = self.provider.fetch_questions("science", "hard", 10)

        assert len(questions) == 10
        assert mock_get.call_args_list[0].kwargs["params"]["category"] == "17"
        assert mock_get.call_args_list[1].kwargs["params"]["category"] == "9"

    def test_partial_results_supplemented_with_general(self, mock_get, mock_sleep):
        science = [make_item(i) for i in range(7)]
        general = [make_item(100 + i, category="General Knowledge") for i in range(3)]
        mock_get.side_effect = [make_response(0, science), make_response(0, general)]

        questions = self.provider.fetch_questions("science", "easy", 10)

        assert len(questions) == 10
        assert [q.question for q in questions[:7]] == [f"Question {i}?" for i in range(7)]
        assert questions[7].category == "General Knowledge"
        second_params = mock_get.call_args_list[1].kwargs["params"]
        assert second_params == {"amount": "3", "category": "9", "difficulty": "easy"}

    def test_short_general_batch_is_not_supplemented_again(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(0, [make_item(i) for i in range(4)])

        questions = self.provider.fetch_questions("general", "easy", 10)

        assert len(questions) == 4
        assert mock_get.call_count == 1

    def test_invalid_parameter_falls_back_after_attempts(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(2)

        questions = self.provider.fetch_questions("sports", "easy", 10)

        assert mock_get.call_count == 3
        assert [q.question for q in questions] == [
            q.question for q in FALLBACK_BANKS["sports"]
        ]

    def test_unexpected_error_uses_fallback(self, mock_get, mock_sleep):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        mock_get.return_value = response

        questions = self.provider.fetch_questions("music", "medium", 10)

        assert [q.question for q in questions] == [
            q.question for q in FALLBACK_BANKS["general"]
        ]


class TestFallbackBank:
    def test_unknown_category_uses_general_bank(self):
        questions = get_fallback_questions("astrology", None, 10)

        assert [q.category for q in questions] == ["General Knowledge"] * 3

    def test_truncated_to_amount(self):
        questions = get_fallback_questions("science", "easy", 2)

        assert len(questions) == 2

    def test_unknown_difficulty_keeps_bank_difficulty(self):
        questions = get_fallback_questions("science", "impossible", 10)

        assert [q.difficulty for q in questions] == [
            q.difficulty for q in FALLBACK_BANKS["science"]
        ]


@patch("app.services.trivia_provider.requests.get")
class TestConnectivity:
    def setup_method(self):
        self.provider = OpenTriviaProvider(base_url="https://trivia.test/api.php")

    def test_connected(self, mock_get):
        mock_get.return_value = make_response(0, [make_item(1)])

        assert self.provider.check_connectivity() is True
        assert mock_get.call_args.kwargs["params"] == {"amount": "1"}

    def test_not_connected(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        assert self.provider.check_connectivity() is False

    def test_available_categories(self, mock_get):
        categories = self.provider.available_categories()

        assert categories["science"] == "Science & Nature"
        assert set(categories) == set(CATEGORY_MAPPING)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
